"""Graph model and export errors."""

from .model import GraphData, GraphEdge, GraphNode, SOURCE_TARGET, FROM_TO
from .errors import (
    GraphExportError,
    PreconditionError,
    EmptyScopeError,
    ExportWriteError,
    ExportInProgressError,
)

__all__ = [
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "SOURCE_TARGET",
    "FROM_TO",
    "GraphExportError",
    "PreconditionError",
    "EmptyScopeError",
    "ExportWriteError",
    "ExportInProgressError",
]
