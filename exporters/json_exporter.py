"""JSON exporter for document link graphs."""

import json
import logging

from graph.errors import ExportInProgressError, ExportWriteError
from graph.model import GraphData, SOURCE_TARGET
from vault.settings import DEFAULT_OUTPUT_PATH
from vault.store import Document, LockHeldError, VaultStore


logger = logging.getLogger(__name__)


def to_json(
    graph: GraphData,
    edge_format: str = SOURCE_TARGET,
    indent: int = 2,
) -> str:
    """
    Convert a graph to pretty-printed JSON.
    
    Args:
        graph: The graph to serialize.
        edge_format: "source-target", or "from-to" for the legacy edge keys.
        indent: JSON indentation level.
    
    Returns:
        JSON text with "nodes" before "edges" and no trailing newline.
    """
    return json.dumps(graph.to_dict(edge_format), indent=indent, ensure_ascii=False)


def export_graph(
    graph: GraphData,
    store: VaultStore,
    output_path: str = DEFAULT_OUTPUT_PATH,
    edge_format: str = SOURCE_TARGET,
) -> Document:
    """
    Write the graph to the output artifact in the vault.
    
    An existing artifact is overwritten in place, otherwise it is created.
    
    Args:
        graph: The graph to write.
        store: Vault the artifact lives in.
        output_path: Vault-relative path of the artifact.
        edge_format: Edge key convention for the JSON.
    
    Returns:
        The written document.
    
    Raises:
        ExportInProgressError: If another export to the same path is running.
        ExportWriteError: If the artifact cannot be written.
    """
    content = to_json(graph, edge_format=edge_format)

    try:
        with store.lock(output_path):
            written = _write(store, output_path, content)
    except LockHeldError as e:
        raise ExportInProgressError(output_path, str(e.lock_path)) from e
    except (OSError, ValueError) as e:
        raise ExportWriteError(output_path, e) from e

    logger.info(
        "Graph exported",
        extra={"output_path": written.path, "nodes": len(graph.nodes), "edges": len(graph.edges)},
    )
    return written


def _write(store: VaultStore, output_path: str, content: str) -> Document:
    try:
        existing = store.get_entity_at(output_path)
        if existing is not None:
            return store.overwrite_entity(existing, content)
        return store.create_entity(output_path, content)
    except (OSError, ValueError) as e:
        raise ExportWriteError(output_path, e) from e
