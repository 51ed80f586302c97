"""Linker module for marker extraction, link resolution and graph building."""

from .parser import extract_markers, extract_aliases
from .resolver import LinkResolver, VaultLinkIndex
from .scope import in_scope, normalize_scope, group_for
from .builder import build_graph

__all__ = [
    "extract_markers",
    "extract_aliases",
    "LinkResolver",
    "VaultLinkIndex",
    "in_scope",
    "normalize_scope",
    "group_for",
    "build_graph",
]
