"""Graph builder that orchestrates scanning and graph construction."""

import logging
import time

from graph.errors import EmptyScopeError
from graph.model import GraphData
from vault.store import VaultStore
from .parser import extract_markers
from .resolver import LinkResolver, MARKDOWN_EXTENSION
from .scope import group_for, in_scope, normalize_scope


logger = logging.getLogger(__name__)


def build_graph(
    store: VaultStore,
    resolver: LinkResolver,
    scope: str = "",
    extension: str = MARKDOWN_EXTENSION,
) -> GraphData:
    """
    Scan the documents in scope and build the link graph.
    
    Args:
        store: Document store to enumerate and read.
        resolver: Maps marker payloads to target documents.
        scope: Target directory; empty means the whole vault.
        extension: Document type that becomes nodes and edge targets.
    
    Returns:
        GraphData with one node per in-scope document and one edge per
        marker that resolves to an in-scope document of the same type.
    
    Raises:
        EmptyScopeError: If no document lies in scope. Nothing is read.
    """
    start_time = time.time()
    scope = normalize_scope(scope)
    documents = [doc for doc in store.list_documents(extension) if in_scope(doc.path, scope)]
    if not documents:
        raise EmptyScopeError(scope)

    graph = GraphData()
    for document in documents:
        graph.add_node(document.basename, group_for(document, scope))

    misses = 0
    for document in documents:
        content = store.read_content(document)

        for payload in extract_markers(content):
            target = resolver.resolve(payload, document.path)
            if (
                target is not None
                and target.extension.lower() == extension.lower()
                and in_scope(target.path, scope)
            ):
                graph.add_edge(document.basename, target.basename)
            else:
                misses += 1
                logger.debug("Skipping [[%s]] in %s", payload, document.path)

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "Graph built",
        extra={
            "scope": scope,
            "nodes": len(graph.nodes),
            "edges": len(graph.edges),
            "unresolved": misses,
            "duration_ms": f"{duration_ms:.2f}",
        },
    )
    return graph
