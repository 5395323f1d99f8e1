"""
CPG Explorer: read-only query service over a precomputed code property graph.
"""

__version__ = "1.0.0"
