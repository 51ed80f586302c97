"""Scope filtering for restricting the graph to a vault sub-tree."""

from typing import Optional

from vault.store import Document


SEPARATOR = "/"


def normalize_scope(scope: Optional[str]) -> str:
    """Clean a configured target directory. None and "/" both mean the whole vault."""
    if not scope:
        return ""
    return scope.strip().replace("\\", SEPARATOR).strip(SEPARATOR)


def in_scope(path: str, scope: str) -> bool:
    """
    Check whether a vault path lies inside the scope directory.
    
    The prefix has to end on a separator, so "AB/c.md" is not inside "A".
    """
    if not scope:
        return True
    return path.startswith(scope + SEPARATOR)


def group_for(document: Document, scope: str) -> str:
    """
    Return the document's directory relative to the scope root.
    
    A document directly inside the scope directory gets "".
    """
    directory = document.parent
    if not scope:
        return directory
    if directory == scope:
        return ""
    prefix = scope + SEPARATOR
    if directory.startswith(prefix):
        return directory[len(prefix):]
    return directory
