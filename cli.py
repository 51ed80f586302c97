#!/usr/bin/env python3
"""
Vault Graph Export CLI

A tool for scanning a vault of interlinked notes for [[links]] and exporting
the resulting document graph to JSON for external visualization.
"""

import argparse
import logging
import sys
from pathlib import Path

from graph.errors import GraphExportError
from graph.model import EDGE_FORMATS
from linker.builder import build_graph
from linker.resolver import LinkResolver
from linker.scope import normalize_scope
from exporters import to_json, export_graph
from vault.settings import SettingsStore
from vault.store import VaultStore
from vault.workspace import require_graph_view


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="vault-graph",
        description="Export the [[link]] graph of a vault to JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vault-graph export ~/Notes                     # Write graph_data.json in the vault
  vault-graph export ~/Notes --scope CardsPublic # Only documents below CardsPublic/
  vault-graph export . --stdout                  # Print the JSON instead
  vault-graph export . --edge-format from-to     # Legacy edge keys
  vault-graph config ~/Notes --set-target CardsPublic
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # Export command
    export = commands.add_parser("export", help="Export the link graph")
    export.add_argument(
        "vault",
        nargs="?",
        default=".",
        help="Vault root directory (default: current directory)",
    )
    export.add_argument(
        "--scope",
        type=str,
        default=None,
        help="Target directory inside the vault (default: saved setting)",
    )
    export.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Vault-relative output path (default: saved setting, graph_data.json)",
    )
    export.add_argument(
        "--edge-format",
        choices=sorted(EDGE_FORMATS),
        default=None,
        help="Edge key convention (default: saved setting, source-target)",
    )
    export.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON to stdout instead of writing the output file",
    )
    export.add_argument(
        "--skip-view-check",
        action="store_true",
        help="Do not require the graph view to be the active view",
    )

    # Config command
    config = commands.add_parser("config", help="Show or change saved settings")
    config.add_argument(
        "vault",
        nargs="?",
        default=".",
        help="Vault root directory (default: current directory)",
    )
    config.add_argument(
        "--set-target",
        type=str,
        default=None,
        metavar="DIR",
        help="Save the target directory (empty string for the whole vault)",
    )
    config.add_argument(
        "--set-edge-format",
        choices=sorted(EDGE_FORMATS),
        default=None,
        help="Save the edge key convention",
    )
    config.add_argument(
        "--set-output",
        type=str,
        default=None,
        metavar="PATH",
        help="Save the vault-relative output path",
    )

    return parser.parse_args(args)


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr, warnings only unless -v is given."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_export(parsed, root: Path) -> int:
    """Build the graph and write (or print) it."""
    try:
        settings = SettingsStore(root).load()
    except (OSError, ValueError) as e:
        print(f"Error reading settings: {e}", file=sys.stderr)
        return 1

    scope = normalize_scope(parsed.scope if parsed.scope is not None else settings.target_directory)
    output_path = parsed.output or settings.output_path
    edge_format = parsed.edge_format or settings.edge_format

    store = VaultStore(root)
    try:
        if not parsed.skip_view_check:
            require_graph_view(root)
        resolver = LinkResolver.for_store(store)
        graph = build_graph(store, resolver, scope=scope)

        if parsed.stdout:
            print(to_json(graph, edge_format=edge_format))
            return 0

        written = export_graph(graph, store, output_path=output_path, edge_format=edge_format)
    except GraphExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error scanning vault: {e}", file=sys.stderr)
        return 1

    print(
        f"Graph exported to: {written.path} ({len(graph.nodes)} nodes, {len(graph.edges)} edges)",
        file=sys.stderr,
    )
    return 0


def run_config(parsed, root: Path) -> int:
    """Show the saved settings, updating them first if asked."""
    settings_store = SettingsStore(root)
    try:
        if parsed.set_target is not None or parsed.set_edge_format or parsed.set_output:
            settings = settings_store.update(
                target_directory=normalize_scope(parsed.set_target) if parsed.set_target is not None else None,
                edge_format=parsed.set_edge_format,
                output_path=parsed.set_output,
            )
        else:
            settings = settings_store.load()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for key, value in settings.model_dump(by_alias=True).items():
        print(f"{key}: {value}")
    return 0


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)
    configure_logging(parsed.verbose)

    root = Path(parsed.vault).resolve()
    if not root.is_dir():
        print(f"Error: '{parsed.vault}' is not a directory", file=sys.stderr)
        return 1

    if parsed.command == "config":
        return run_config(parsed, root)
    return run_export(parsed, root)


if __name__ == "__main__":
    sys.exit(main())
