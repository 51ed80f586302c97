"""Graph data model for exported document links."""

from typing import Any, Dict, List, NamedTuple, Optional


SOURCE_TARGET = "source-target"
FROM_TO = "from-to"

# Edge key names per wire format version
EDGE_FORMATS = {
    SOURCE_TARGET: ("source", "target"),
    FROM_TO: ("from", "to"),
}


def edge_keys(edge_format: str):
    """Return the (source, target) key names for an edge format."""
    try:
        return EDGE_FORMATS[edge_format]
    except KeyError:
        choices = ", ".join(sorted(EDGE_FORMATS))
        raise ValueError(f"Unknown edge format '{edge_format}' (expected one of: {choices})") from None


class GraphNode(NamedTuple):
    """A document in the graph, grouped by its directory."""

    id: str
    group: str


class GraphEdge(NamedTuple):
    """A resolved link from one document to another."""

    source: str
    target: str


class GraphData:
    """
    The node and edge collections of an export.
    
    Nodes keep document enumeration order. Edges keep document order, then
    the order of references inside each document. Nothing is deduplicated.
    """

    def __init__(
        self,
        nodes: Optional[List[GraphNode]] = None,
        edges: Optional[List[GraphEdge]] = None,
    ):
        self.nodes: List[GraphNode] = list(nodes or [])
        self.edges: List[GraphEdge] = list(edges or [])

    def add_node(self, node_id: str, group: str) -> None:
        """Append a node; callers keep ids unique."""
        self.nodes.append(GraphNode(node_id, group))

    def add_edge(self, source: str, target: str) -> None:
        """Append a directed edge between two node ids."""
        self.edges.append(GraphEdge(source, target))

    def to_dict(self, edge_format: str = SOURCE_TARGET) -> Dict[str, Any]:
        """
        Convert the graph to plain data with a stable key order.
        
        Args:
            edge_format: Either "source-target" or the legacy "from-to".
        
        Returns:
            Dict with "nodes" before "edges".
        """
        source_key, target_key = edge_keys(edge_format)
        return {
            "nodes": [{"id": node.id, "group": node.group} for node in self.nodes],
            "edges": [{source_key: edge.source, target_key: edge.target} for edge in self.edges],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphData):
            return NotImplemented
        return self.nodes == other.nodes and self.edges == other.edges

    def __repr__(self) -> str:
        return f"GraphData(nodes={len(self.nodes)}, edges={len(self.edges)})"
