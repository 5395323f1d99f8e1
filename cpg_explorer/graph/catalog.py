"""
Single-query lookups over the precomputed dashboard tables.

Nothing here traverses the graph: each method maps onto one or two SQL
statements against tables the CPG builder materialized ahead of time.
"""

from typing import List, Dict, Any, Optional

from ..errors import NodeNotFoundError
from ..utils.logger import app_logger
from .sqlite_client import SqliteGraphClient


OVERVIEW_KEYS = [
    "total_packages",
    "total_files",
    "total_functions",
    "total_types",
    "total_nodes",
    "total_edges",
    "total_loc",
    "avg_complexity",
    "max_complexity",
    "total_call_edges",
    "total_dfg_edges",
    "total_cfg_edges",
    "total_goroutine_launches",
    "total_defers",
    "total_findings",
    "total_interfaces",
]

PACKAGE_SORT_COLUMNS = {
    "package",
    "function_count",
    "total_loc",
    "total_complexity",
    "avg_complexity",
    "max_complexity",
    "file_count",
    "type_count",
    "interface_count",
}

DEFAULT_PACKAGE_SORT = "total_complexity"

_FUNCTION_COLUMNS = """
    n.id AS id, n.name AS name, COALESCE(n.package, '') AS package,
    COALESCE(n.file, '') AS file, COALESCE(n.line, 0) AS line,
    COALESCE(n.end_line, 0) AS end_line,
    COALESCE(m.cyclomatic_complexity, 0) AS complexity,
    COALESCE(m.fan_in, 0) AS fan_in, COALESCE(m.fan_out, 0) AS fan_out,
    COALESCE(m.loc, 0) AS loc, COALESCE(m.num_params, 0) AS num_params
"""


class GraphCatalog:
    """Dashboard, package, function, source and search lookups."""

    def __init__(self, client: SqliteGraphClient):
        self.logger = app_logger.bind(component="graph_catalog")
        self.client = client

    def overview(self) -> Dict[str, str]:
        """High-level statistics; keys missing from the store read as empty strings."""
        rows = self.client.query("SELECT key, value FROM dashboard_overview")
        values = {row["key"]: row["value"] for row in rows if row["value"] is not None}
        return {key: str(values.get(key, "")) for key in OVERVIEW_KEYS}

    def distributions(self) -> Dict[str, List[Dict[str, Any]]]:
        """Chart data for node kinds, edge kinds and the complexity histogram."""
        return {
            "node_kinds": self.client.query(
                "SELECT node_kind AS label, count, percentage "
                "FROM dashboard_node_distribution ORDER BY count DESC"
            ),
            "edge_kinds": self.client.query(
                "SELECT edge_kind AS label, count, percentage "
                "FROM dashboard_edge_distribution ORDER BY count DESC"
            ),
            "complexity": self.client.query(
                "SELECT bucket AS label, function_count AS count "
                "FROM dashboard_complexity_distribution ORDER BY bucket_min"
            ),
        }

    def list_packages(self, limit: int = 200, offset: int = 0,
                      sort: Optional[str] = None) -> List[Dict[str, Any]]:
        """Package rollups ordered by an allow-listed column, descending."""
        if sort not in PACKAGE_SORT_COLUMNS:
            sort = DEFAULT_PACKAGE_SORT

        return self.client.query(
            f"""
            SELECT package AS name, file_count, function_count, total_loc,
                   total_complexity, avg_complexity, max_complexity,
                   type_count, interface_count
            FROM dashboard_package_treemap
            ORDER BY {sort} DESC LIMIT ? OFFSET ?
            """,
            (limit, offset),
        )

    def package_graph(self) -> Dict[str, List[Dict[str, Any]]]:
        """Package dependency edges plus per-package metrics for each endpoint."""
        edges = self.client.query(
            "SELECT source, target, weight FROM dashboard_package_graph ORDER BY weight DESC"
        )

        packages = dict.fromkeys(
            name for edge in edges for name in (edge["source"], edge["target"])
        )

        nodes = []
        for name in packages:
            node = {
                "id": name,
                "label": name,
                "function_count": 0,
                "total_loc": 0,
                "total_complexity": 0,
                "avg_complexity": 0.0,
            }
            metrics = self.client.query_one(
                """
                SELECT function_count, total_loc, total_complexity, avg_complexity
                FROM dashboard_package_treemap WHERE package = ?
                """,
                (name,),
            )
            if metrics:
                node.update(metrics)
            nodes.append(node)

        return {"nodes": nodes, "edges": edges}

    def package_functions(self, package: str, limit: int = 100) -> List[Dict[str, Any]]:
        """Functions of one package, most complex first."""
        return self.client.query(
            f"""
            SELECT {_FUNCTION_COLUMNS}
            FROM nodes n
            LEFT JOIN metrics m ON m.function_id = n.id
            WHERE n.kind = 'function' AND n.package = ?
            ORDER BY COALESCE(m.cyclomatic_complexity, 0) DESC
            LIMIT ?
            """,
            (package, limit),
        )

    def search_functions(self, search: Optional[str] = None, package: Optional[str] = None,
                         limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        """Functions whose name contains ``search``, optionally within one package."""
        conditions = ["n.kind = 'function'"]
        params: List[Any] = []
        if search:
            conditions.append("n.name LIKE ?")
            params.append(f"%{search}%")
        if package:
            conditions.append("n.package = ?")
            params.append(package)
        params.extend([limit, offset])

        return self.client.query(
            f"""
            SELECT {_FUNCTION_COLUMNS}
            FROM nodes n
            LEFT JOIN metrics m ON m.function_id = n.id
            WHERE {' AND '.join(conditions)}
            ORDER BY COALESCE(m.cyclomatic_complexity, 0) DESC
            LIMIT ? OFFSET ?
            """,
            params,
        )

    def function_detail(self, function_id: str) -> Dict[str, Any]:
        """Detail row for one function.

        Raises:
            NodeNotFoundError: No detail row exists for ``function_id``.
        """
        row = self.client.query_one(
            """
            SELECT function_id AS id, name, COALESCE(package, '') AS package,
                   COALESCE(file, '') AS file, COALESCE(line, 0) AS line,
                   COALESCE(end_line, 0) AS end_line, COALESCE(signature, '') AS signature,
                   complexity, loc, fan_in, fan_out, num_params,
                   num_locals, num_calls, num_branches, num_returns,
                   finding_count, COALESCE(callers, '') AS callers,
                   COALESCE(callees, '') AS callees
            FROM dashboard_function_detail
            WHERE function_id = ?
            """,
            (function_id,),
        )
        if row is None:
            raise NodeNotFoundError(function_id, "function not found")
        return row

    def source(self, file: str) -> Dict[str, Any]:
        """Source text of one file."""
        row = self.client.query_one(
            "SELECT file, content, COALESCE(package, '') AS package FROM sources WHERE file = ?",
            (file,),
        )
        if row is None:
            raise NodeNotFoundError(file, "file not found")
        return row

    def file_outline(self, file: str) -> List[Dict[str, Any]]:
        """Symbols declared in one file, in source order."""
        return self.client.query(
            """
            SELECT id, name, kind, COALESCE(line, 0) AS line, COALESCE(end_line, 0) AS end_line
            FROM file_outline
            WHERE file = ?
            ORDER BY line
            """,
            (file,),
        )

    def schema(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        if category:
            return self.client.query(
                "SELECT category, name, description, COALESCE(example, '') AS example "
                "FROM schema_docs WHERE category = ? ORDER BY name",
                (category,),
            )
        return self.client.query(
            "SELECT category, name, description, COALESCE(example, '') AS example "
            "FROM schema_docs ORDER BY category, name"
        )

    def queries(self) -> List[Dict[str, Any]]:
        return self.client.query("SELECT name, description, sql FROM queries ORDER BY name")

    def hotspots(self, limit: int = 30) -> List[Dict[str, Any]]:
        """Functions with the highest combined risk score."""
        return self.client.query(
            """
            SELECT function_id, name, COALESCE(package, '') AS package,
                   COALESCE(file, '') AS file, complexity, loc, fan_in, fan_out,
                   finding_count, hotspot_score
            FROM dashboard_hotspots
            ORDER BY hotspot_score DESC
            LIMIT ?
            """,
            (limit,),
        )

    def search(self, q: Optional[str], limit: int = 30) -> List[Dict[str, Any]]:
        """Symbol search ranking exact matches, then prefixes, then substrings."""
        if not q:
            return []

        results = self.client.query(
            """
            SELECT id, name, kind, COALESCE(package, '') AS package,
                   COALESCE(file, '') AS file, COALESCE(line, 0) AS line
            FROM symbol_index
            WHERE name LIKE ?
            ORDER BY
                CASE WHEN name = ? THEN 0
                     WHEN name LIKE ? THEN 1
                     ELSE 2 END,
                name
            LIMIT ?
            """,
            (f"%{q}%", q, f"{q}%", limit),
        )
        self.logger.debug(f"Symbol search {q!r}: {len(results)} results")
        return results
