"""
Graph access: SQLite node store, bounded traversal and catalog lookups.
"""

from .sqlite_client import SqliteGraphClient
from .traversal import GraphTraverser
from .profiles import TraversalProfile, call_graph_profile, data_flow_profile
from .explorer import CodeGraphExplorer
from .catalog import GraphCatalog

__all__ = [
    'SqliteGraphClient',
    'GraphTraverser',
    'TraversalProfile',
    'call_graph_profile',
    'data_flow_profile',
    'CodeGraphExplorer',
    'GraphCatalog',
]
