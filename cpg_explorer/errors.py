"""
Error taxonomy for the CPG explorer.

Everything raised on purpose inherits from CpgExplorerError so the API layer
can translate it into a status code in one place.
"""


class CpgExplorerError(Exception):
    """Base exception for all explorer errors."""


class InvalidInputError(CpgExplorerError):
    """A request parameter is missing or malformed."""


class NodeNotFoundError(CpgExplorerError):
    """An identifier does not resolve to a node in the graph."""

    def __init__(self, node_id: str, message: str = "node not found"):
        self.node_id = node_id
        super().__init__(message)


class GraphStoreError(CpgExplorerError):
    """The backing graph store failed to answer a query."""
