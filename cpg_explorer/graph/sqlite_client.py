import sqlite3
import threading
from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence

from ..config import settings
from ..errors import GraphStoreError
from ..types import Direction, GraphNode
from ..utils.logger import app_logger


PRAGMAS = [
    "PRAGMA mmap_size = 536870912",  # 512 MiB memory-mapped I/O
    "PRAGMA cache_size = -128000",   # 128 MB page cache
    "PRAGMA temp_store = MEMORY",
    "PRAGMA query_only = ON",
]

_NODE_COLUMNS = """
    n.id AS id, n.kind AS kind, n.name AS label,
    COALESCE(n.package, '') AS package, COALESCE(n.file, '') AS file,
    COALESCE(n.line, 0) AS line
"""

_METRIC_COLUMNS = """,
    COALESCE(m.cyclomatic_complexity, 0) AS complexity,
    COALESCE(m.fan_in, 0) AS fan_in, COALESCE(m.fan_out, 0) AS fan_out
"""

_METRICS_JOIN = "LEFT JOIN metrics m ON m.function_id = n.id"

# (column matched against the expanded node, column holding the neighbor)
_NEIGHBOR_COLUMNS = {
    Direction.OUTGOING: ("source", "target"),
    Direction.INCOMING: ("target", "source"),
}


class SqliteGraphClient:
    """Read-only SQLite client for the precomputed code property graph."""

    def __init__(self, db_path: Optional[str] = None):
        self.logger = app_logger.bind(component="sqlite_graph_client")
        self.db_path = Path(db_path or settings.cpg_db_path)
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        """Open a read-only connection and apply performance pragmas."""
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        except sqlite3.Error as e:
            self.logger.error(f"Failed to open graph database {self.db_path}: {e}")
            raise GraphStoreError(f"open database: {e}") from e

        conn.row_factory = sqlite3.Row
        for pragma in PRAGMAS:
            try:
                conn.execute(pragma)
            except sqlite3.Error as e:
                self.logger.warning(f"Pragma failed ({pragma}): {e}")

        self.logger.info(f"Opened graph database {self.db_path}")
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        """Connection owned by the calling thread."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._connect()
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return conn

    def close(self):
        """Close every connection opened by this client."""
        with self._lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
        self._local = threading.local()
        self.logger.info("Closed graph database connections")

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a read query and return rows as dictionaries."""
        try:
            rows = self.conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise GraphStoreError(str(e)) from e
        return [dict(row) for row in rows]

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Run a read query expected to return at most one row."""
        try:
            row = self.conn.execute(sql, tuple(params)).fetchone()
        except sqlite3.Error as e:
            raise GraphStoreError(str(e)) from e
        return dict(row) if row is not None else None

    def get_node(self, node_id: str, include_metrics: bool = False) -> Optional[GraphNode]:
        """Fetch one node by identifier, or None when it does not exist."""
        sql = f"SELECT {_NODE_COLUMNS}"
        if include_metrics:
            sql += _METRIC_COLUMNS
        sql += " FROM nodes n "
        if include_metrics:
            sql += _METRICS_JOIN
        sql += " WHERE n.id = ?"

        row = self.query_one(sql, (node_id,))
        if row is None:
            return None
        return _row_to_node(row, include_metrics)

    def get_neighbors(self, node_id: str, edge_kind: str, direction: Direction, cap: int,
                      node_kind: Optional[str] = None,
                      include_metrics: bool = False) -> List[GraphNode]:
        """Fetch up to ``cap`` neighbors of ``node_id`` along ``edge_kind`` edges.

        Outgoing returns edge targets where the node is the source, incoming
        returns edge sources where the node is the target. One row per edge,
        so parallel edges yield the same neighbor more than once. The cap is
        applied by the store as a LIMIT clause.
        """
        if direction not in _NEIGHBOR_COLUMNS:
            raise ValueError(f"neighbor queries need a single direction, got {direction}")
        match_column, neighbor_column = _NEIGHBOR_COLUMNS[direction]

        sql = f"SELECT {_NODE_COLUMNS}"
        if include_metrics:
            sql += _METRIC_COLUMNS
        sql += f" FROM edges e JOIN nodes n ON n.id = e.{neighbor_column} "
        if include_metrics:
            sql += _METRICS_JOIN
        sql += f" WHERE e.{match_column} = ? AND e.kind = ?"
        params: List[Any] = [node_id, edge_kind]
        if node_kind is not None:
            sql += " AND n.kind = ?"
            params.append(node_kind)
        sql += " LIMIT ?"
        params.append(cap)

        rows = self.query(sql, params)
        return [_row_to_node(row, include_metrics) for row in rows]


def _row_to_node(row: Dict[str, Any], include_metrics: bool) -> GraphNode:
    if include_metrics:
        return GraphNode(
            id=row["id"],
            kind=row["kind"],
            label=row["label"],
            package=row["package"],
            file=row["file"],
            line=row["line"],
            complexity=row["complexity"],
            fan_in=row["fan_in"],
            fan_out=row["fan_out"],
        )
    return GraphNode(
        id=row["id"],
        kind=row["kind"],
        label=row["label"],
        package=row["package"],
        file=row["file"],
        line=row["line"],
    )
