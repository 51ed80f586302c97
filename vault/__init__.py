"""Vault access: documents, settings and workspace state."""

from .store import Document, VaultStore
from .settings import Settings, SettingsStore
from .workspace import active_view_type, require_graph_view

__all__ = [
    "Document",
    "VaultStore",
    "Settings",
    "SettingsStore",
    "active_view_type",
    "require_graph_view",
]
