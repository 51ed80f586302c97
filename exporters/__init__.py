"""Exporters for writing the link graph."""

from .json_exporter import to_json, export_graph

__all__ = ["to_json", "export_graph"]
