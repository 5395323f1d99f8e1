from contextlib import asynccontextmanager
from typing import List, Dict, Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import settings
from .errors import GraphStoreError, InvalidInputError, NodeNotFoundError
from .graph.catalog import GraphCatalog
from .graph.explorer import CodeGraphExplorer
from .graph.sqlite_client import SqliteGraphClient
from .utils.logger import app_logger


logger = app_logger.bind(component="api_server")

# Initialize components
graph_client = SqliteGraphClient(settings.cpg_db_path)
explorer = CodeGraphExplorer(graph_client)
catalog = GraphCatalog(graph_client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Serving code property graph from {settings.cpg_db_path}")
    yield
    graph_client.close()


app = FastAPI(title="CPG Explorer API", version=__version__, lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SubgraphResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


def get_explorer() -> CodeGraphExplorer:
    return explorer


def get_catalog() -> GraphCatalog:
    return catalog


def parse_int(value: Optional[str], default: int) -> int:
    """Read an integer query parameter, falling back to ``default`` when absent or malformed."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return _error(str(exc), 400)


@app.exception_handler(NodeNotFoundError)
async def not_found_handler(request: Request, exc: NodeNotFoundError):
    return _error(str(exc), 404)


@app.exception_handler(GraphStoreError)
async def store_error_handler(request: Request, exc: GraphStoreError):
    logger.error(f"Graph store error on {request.url.path}: {exc}")
    return _error("graph store query failed", 500)


@app.get("/api/callgraph", response_model=SubgraphResponse)
def get_call_graph(
    id: Optional[str] = Query(None, description="Function id"),
    depth: Optional[str] = Query(None, description="BFS depth, 1-5"),
    direction: Optional[str] = Query(None, description="outgoing, incoming or both"),
    explorer: CodeGraphExplorer = Depends(get_explorer),
):
    """Call-graph neighborhood of a function."""
    if not id:
        raise InvalidInputError("function id is required")
    try:
        result = explorer.call_graph(id, parse_int(depth, explorer.call_graph_profile.default_depth), direction)
    except NodeNotFoundError:
        raise NodeNotFoundError(id, "function not found") from None
    return result.to_dict()


@app.get("/api/dataflow", response_model=SubgraphResponse)
def get_data_flow(
    id: Optional[str] = Query(None, description="Node id"),
    depth: Optional[str] = Query(None, description="BFS depth, 1-6"),
    direction: Optional[str] = Query(None, description="forward, backward or both"),
    explorer: CodeGraphExplorer = Depends(get_explorer),
):
    """Data-flow neighborhood of a node."""
    if not id:
        raise InvalidInputError("node id is required")
    result = explorer.data_flow(id, parse_int(depth, explorer.data_flow_profile.default_depth), direction)
    return result.to_dict()


@app.get("/api/overview")
def get_overview(catalog: GraphCatalog = Depends(get_catalog)):
    """High-level CPG statistics."""
    return catalog.overview()


@app.get("/api/distributions")
def get_distributions(catalog: GraphCatalog = Depends(get_catalog)):
    """Chart-ready distributions for the dashboard."""
    return catalog.distributions()


@app.get("/api/packages")
def list_packages(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    sort: Optional[str] = None,
    catalog: GraphCatalog = Depends(get_catalog),
):
    """Packages with their rollup metrics."""
    return catalog.list_packages(parse_int(limit, 200), parse_int(offset, 0), sort)


@app.get("/api/packages/graph")
def get_package_graph(catalog: GraphCatalog = Depends(get_catalog)):
    """Package dependency graph."""
    return catalog.package_graph()


@app.get("/api/packages/{name}/functions")
def get_package_functions(
    name: str,
    limit: Optional[str] = None,
    catalog: GraphCatalog = Depends(get_catalog),
):
    """Functions of one package."""
    return catalog.package_functions(name, parse_int(limit, 100))


@app.get("/api/functions")
def search_functions(
    search: Optional[str] = None,
    package: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    catalog: GraphCatalog = Depends(get_catalog),
):
    """Functions filtered by name and package."""
    return catalog.search_functions(search, package, parse_int(limit, 50), parse_int(offset, 0))


@app.get("/api/functions/detail")
def get_function_detail(id: Optional[str] = None, catalog: GraphCatalog = Depends(get_catalog)):
    """Detailed information about one function."""
    if not id:
        raise InvalidInputError("function id is required")
    return catalog.function_detail(id)


@app.get("/api/source")
def get_source(file: Optional[str] = None, catalog: GraphCatalog = Depends(get_catalog)):
    """Source code of a file."""
    if not file:
        raise InvalidInputError("file path is required")
    return catalog.source(file)


@app.get("/api/source/outline")
def get_file_outline(file: Optional[str] = None, catalog: GraphCatalog = Depends(get_catalog)):
    """Symbol outline of a file."""
    if not file:
        raise InvalidInputError("file path is required")
    return catalog.file_outline(file)


@app.get("/api/schema")
def get_schema(category: Optional[str] = None, catalog: GraphCatalog = Depends(get_catalog)):
    """Self-documentation of the CPG tables."""
    return catalog.schema(category)


@app.get("/api/queries")
def get_queries(catalog: GraphCatalog = Depends(get_catalog)):
    """Built-in query catalog."""
    return catalog.queries()


@app.get("/api/hotspots")
def get_hotspots(limit: Optional[str] = None, catalog: GraphCatalog = Depends(get_catalog)):
    """Top hotspot functions by combined risk score."""
    return catalog.hotspots(parse_int(limit, 30))


@app.get("/api/search")
def global_search(
    q: Optional[str] = None,
    limit: Optional[str] = None,
    catalog: GraphCatalog = Depends(get_catalog),
):
    """Search functions, types and packages by name."""
    return catalog.search(q, parse_int(limit, 30))
