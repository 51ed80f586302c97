"""Inspection of the vault's saved workspace layout."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from graph.errors import PreconditionError


logger = logging.getLogger(__name__)

WORKSPACE_FILE = Path(".obsidian") / "workspace.json"
GRAPH_VIEW = "graph"


def _iter_leaves(item: Any) -> Iterator[Dict[str, Any]]:
    """Walk the nested split/tabs layout and yield every leaf."""
    if isinstance(item, dict):
        if item.get("type") == "leaf":
            yield item
        for child in item.get("children") or []:
            yield from _iter_leaves(child)
        for key in ("main", "left", "right"):
            if key in item:
                yield from _iter_leaves(item[key])


def active_view_type(vault_root: Path) -> Optional[str]:
    """
    Return the view type of the active workspace leaf.
    
    Args:
        vault_root: The vault directory.
    
    Returns:
        The view type (e.g. "graph", "markdown"), or None when there is no
        workspace file, no active leaf, or the file cannot be parsed.
    """
    workspace_path = Path(vault_root) / WORKSPACE_FILE
    try:
        data = json.loads(workspace_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Cannot read %s: %s", workspace_path, e)
        return None

    if not isinstance(data, dict):
        return None
    active_id = data.get("active")
    if not active_id:
        return None

    for leaf in _iter_leaves(data):
        if leaf.get("id") == active_id:
            state = leaf.get("state") or {}
            return state.get("type")
    return None


def require_graph_view(vault_root: Path) -> None:
    """
    Check that the graph view is the active view.
    
    Raises:
        PreconditionError: If there is no active view or it is another kind.
    """
    view_type = active_view_type(vault_root)
    if view_type is None:
        raise PreconditionError("No active view found. Open the Graph view first.")
    if view_type != GRAPH_VIEW:
        raise PreconditionError(
            f"No graph view is active (current view: {view_type}). Open the Graph view first."
        )
