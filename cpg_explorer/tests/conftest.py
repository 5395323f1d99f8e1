import sqlite3
from pathlib import Path
from typing import Generator

import pytest

from cpg_explorer.graph.catalog import GraphCatalog
from cpg_explorer.graph.explorer import CodeGraphExplorer
from cpg_explorer.graph.sqlite_client import SqliteGraphClient

from .fakes import HUB_FANOUT


SCHEMA = """
CREATE TABLE nodes (
    id TEXT PRIMARY KEY, kind TEXT NOT NULL, name TEXT NOT NULL,
    package TEXT, file TEXT, line INTEGER, end_line INTEGER
);
CREATE TABLE edges (source TEXT NOT NULL, target TEXT NOT NULL, kind TEXT NOT NULL);
CREATE TABLE metrics (
    function_id TEXT PRIMARY KEY, cyclomatic_complexity INTEGER,
    fan_in INTEGER, fan_out INTEGER, loc INTEGER, num_params INTEGER
);
CREATE TABLE dashboard_overview (key TEXT PRIMARY KEY, value TEXT);
CREATE TABLE dashboard_node_distribution (node_kind TEXT, count INTEGER, percentage REAL);
CREATE TABLE dashboard_edge_distribution (edge_kind TEXT, count INTEGER, percentage REAL);
CREATE TABLE dashboard_complexity_distribution (bucket TEXT, bucket_min INTEGER, function_count INTEGER);
CREATE TABLE dashboard_package_treemap (
    package TEXT PRIMARY KEY, file_count INTEGER, function_count INTEGER, total_loc INTEGER,
    total_complexity INTEGER, avg_complexity REAL, max_complexity INTEGER,
    type_count INTEGER, interface_count INTEGER
);
CREATE TABLE dashboard_package_graph (source TEXT, target TEXT, weight INTEGER);
CREATE TABLE dashboard_function_detail (
    function_id TEXT PRIMARY KEY, name TEXT, package TEXT, file TEXT, line INTEGER,
    end_line INTEGER, signature TEXT, complexity INTEGER, loc INTEGER, fan_in INTEGER,
    fan_out INTEGER, num_params INTEGER, num_locals INTEGER, num_calls INTEGER,
    num_branches INTEGER, num_returns INTEGER, finding_count INTEGER,
    callers TEXT, callees TEXT
);
CREATE TABLE dashboard_hotspots (
    function_id TEXT, name TEXT, package TEXT, file TEXT, complexity INTEGER, loc INTEGER,
    fan_in INTEGER, fan_out INTEGER, finding_count INTEGER, hotspot_score REAL
);
CREATE TABLE sources (file TEXT PRIMARY KEY, content TEXT, package TEXT);
CREATE TABLE file_outline (id TEXT, file TEXT, name TEXT, kind TEXT, line INTEGER, end_line INTEGER);
CREATE TABLE schema_docs (category TEXT, name TEXT, description TEXT, example TEXT);
CREATE TABLE queries (name TEXT, description TEXT, sql TEXT);
CREATE TABLE symbol_index (id TEXT, name TEXT, kind TEXT, package TEXT, file TEXT, line INTEGER);
"""


def _populate(conn: sqlite3.Connection):
    nodes = [
        ("f1", "function", "Start", "app", "app/main.go", 10, 20),
        ("f2", "function", "Handle", "app", "app/main.go", 30, 45),
        ("f3", "function", "Render", "app/view", "app/view/render.go", 5, 60),
        ("t1", "type", "Config", "app", "app/config.go", 3, 9),
        ("hub", "function", "Dispatch", "app/bus", "app/bus/bus.go", 1, 200),
        ("v1", "variable", "cfg", "app", "app/main.go", 11, None),
        ("v2", "variable", "opts", "app", "app/main.go", 12, None),
        ("v3", "variable", "result", None, None, None, None),
        ("v4", "variable", "err", "app", "app/main.go", 14, None),
    ]
    nodes += [
        (f"leaf{i:02d}", "function", f"Leaf{i:02d}", "app/bus", "app/bus/leaf.go", i, i)
        for i in range(HUB_FANOUT)
    ]
    conn.executemany("INSERT INTO nodes VALUES (?, ?, ?, ?, ?, ?, ?)", nodes)

    edges = [
        ("f1", "f2", "call"),
        ("f2", "f3", "call"),
        ("f1", "t1", "call"),
        ("f1", "f2", "cfg"),
        ("v1", "v2", "dfg"),
        ("v2", "v3", "dfg"),
        ("v1", "v4", "dfg"),
        ("v4", "v4", "dfg"),
        ("v1", "f2", "dfg"),
    ]
    edges += [("hub", f"leaf{i:02d}", "call") for i in range(HUB_FANOUT)]
    conn.executemany("INSERT INTO edges VALUES (?, ?, ?)", edges)

    conn.executemany("INSERT INTO metrics VALUES (?, ?, ?, ?, ?, ?)", [
        ("f1", 5, 0, 2, 11, 0),
        ("f2", 2, 1, 1, 16, 1),
        ("f3", 9, 1, 0, 56, 3),
        ("hub", 14, 0, HUB_FANOUT, 200, 2),
    ])

    conn.executemany("INSERT INTO dashboard_overview VALUES (?, ?)", [
        ("total_packages", "3"),
        ("total_functions", "44"),
        ("total_call_edges", "43"),
        ("total_findings", None),
    ])
    conn.executemany("INSERT INTO dashboard_node_distribution VALUES (?, ?, ?)", [
        ("function", 44, 83.0),
        ("variable", 4, 7.5),
        ("type", 1, 1.9),
    ])
    conn.executemany("INSERT INTO dashboard_edge_distribution VALUES (?, ?, ?)", [
        ("call", 43, 84.3),
        ("dfg", 4, 7.8),
    ])
    conn.executemany("INSERT INTO dashboard_complexity_distribution VALUES (?, ?, ?)", [
        ("11-20", 11, 1),
        ("1-5", 1, 42),
        ("6-10", 6, 1),
    ])
    conn.executemany("INSERT INTO dashboard_package_treemap VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)", [
        ("app", 2, 2, 27, 7, 3.5, 5, 1, 0),
        ("app/view", 1, 1, 56, 9, 9.0, 9, 0, 0),
        ("app/bus", 2, 41, 240, 54, 1.3, 14, 0, 1),
    ])
    conn.executemany("INSERT INTO dashboard_package_graph VALUES (?, ?, ?)", [
        ("app", "app/view", 1),
        ("app", "app/bus", 4),
        ("app/bus", "app/ext", 2),
    ])
    conn.execute(
        "INSERT INTO dashboard_function_detail VALUES "
        "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        ("f2", "Handle", "app", "app/main.go", 30, 45, "func Handle(w Writer)",
         2, 16, 1, 1, 1, 3, 1, 1, 1, 0, "Start", None),
    )
    conn.executemany("INSERT INTO dashboard_hotspots VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", [
        ("f3", "Render", "app/view", "app/view/render.go", 9, 56, 1, 0, 2, 0.71),
        ("hub", "Dispatch", "app/bus", "app/bus/bus.go", 14, 200, 0, 40, 0, 0.93),
        ("f1", "Start", "app", "app/main.go", 5, 11, 0, 2, 0, 0.12),
    ])
    conn.execute(
        "INSERT INTO sources VALUES (?, ?, ?)",
        ("app/main.go", "package app\n\nfunc Start() {}\n", "app"),
    )
    conn.executemany("INSERT INTO file_outline VALUES (?, ?, ?, ?, ?, ?)", [
        ("f2", "app/main.go", "Handle", "function", 30, 45),
        ("f1", "app/main.go", "Start", "function", 10, 20),
    ])
    conn.executemany("INSERT INTO schema_docs VALUES (?, ?, ?, ?)", [
        ("table", "nodes", "One row per program entity", "SELECT * FROM nodes LIMIT 1"),
        ("table", "edges", "Typed relations", None),
        ("view", "dashboard_hotspots", "Risk ranking", None),
    ])
    conn.execute(
        "INSERT INTO queries VALUES (?, ?, ?)",
        ("complex_functions", "Most complex functions", "SELECT * FROM metrics ORDER BY cyclomatic_complexity DESC"),
    )
    conn.executemany("INSERT INTO symbol_index VALUES (?, ?, ?, ?, ?, ?)", [
        ("f2", "Handle", "function", "app", "app/main.go", 30),
        ("h2", "HandleAll", "function", "app", "app/main.go", 80),
        ("h3", "MustHandle", "function", "app", "app/main.go", 90),
        ("pkg:handle", "handle", "package", None, None, None),
    ])


def build_cpg_database(path: Path) -> Path:
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA)
        _populate(conn)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def cpg_db_path(tmp_path: Path) -> Path:
    """Create a small CPG database on disk."""
    return build_cpg_database(tmp_path / "cpg.db")


@pytest.fixture
def graph_client(cpg_db_path: Path) -> Generator[SqliteGraphClient, None, None]:
    """Create a read-only client over the sample CPG."""
    client = SqliteGraphClient(str(cpg_db_path))

    yield client

    client.close()


@pytest.fixture
def explorer(graph_client: SqliteGraphClient) -> CodeGraphExplorer:
    return CodeGraphExplorer(graph_client)


@pytest.fixture
def catalog(graph_client: SqliteGraphClient) -> GraphCatalog:
    return GraphCatalog(graph_client)
