"""Command-line entry point and connection sub-commands."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from mongotab import __version__
from mongotab.domains.connections.domain.connection import Connection
from mongotab.shared.app import AppServices, RuntimeConfig, build_app_services
from mongotab.shared.core.errors import StorageError
from mongotab.shared.core.log_setup import configure_logging

logger = logging.getLogger(__name__)


def cmd_connection_list(args, services: AppServices) -> int:
    """List all saved connections."""
    connections = services.connections.connections
    if not connections:
        print("No saved connections.")
        return 0

    print(f"{'Name':<24} {'URL':<50}")
    print("-" * 75)
    for conn in connections:
        url = conn.display_url
        url = url[:48] + ".." if len(url) > 50 else url
        print(f"{conn.name:<24} {url:<50}")
    return 0


def cmd_connection_add(args, services: AppServices) -> int:
    """Save a new connection."""
    if services.connections.find(name=args.name) is not None:
        print(f"Error: Connection '{args.name}' already exists.")
        return 1
    try:
        services.connections.save(Connection(name=args.name, url=args.url))
    except StorageError as exc:
        print(f"Error: {exc}")
        return 1
    print(f"Connection '{args.name}' saved successfully.")
    return 0


def cmd_connection_delete(args, services: AppServices) -> int:
    """Delete a connection."""
    conn = services.connections.find(name=args.connection_name)
    if conn is None:
        print(f"Error: Connection '{args.connection_name}' not found.")
        return 1
    try:
        services.connections.delete(conn.id)
    except StorageError as exc:
        print(f"Error: {exc}")
        return 1
    print(f"Connection '{conn.name}' deleted successfully.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mongotab", description="Multi-tab terminal UI for MongoDB")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--url", help="Connect to this MongoDB URL on startup")
    target.add_argument("--connection", "-c", dest="connection_name", help="Connect to a saved connection on startup")
    parser.add_argument("--database", "-d", help="Database to open after connecting")
    parser.add_argument("--collection", help="Collection to open after connecting (needs --database)")
    parser.add_argument("--last", action="store_true", help="Restore the tabs of the last session")
    parser.add_argument("--page-size", type=int, help="Documents per page")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file")
    parser.add_argument("--config-dir", type=Path, help="Directory for connections and session files")
    parser.add_argument("--debug", action="store_true", help="Log at debug level")
    parser.add_argument("--mock", action="store_true", help="Use a built-in demo dataset instead of a server")

    subparsers = parser.add_subparsers(dest="command")
    conn_parser = subparsers.add_parser("connection", help="Manage saved connections")
    conn_sub = conn_parser.add_subparsers(dest="conn_command", required=True)

    conn_sub.add_parser("list", help="List saved connections")

    add_parser = conn_sub.add_parser("add", help="Save a new connection")
    add_parser.add_argument("name", help="Connection name")
    add_parser.add_argument("url", help="MongoDB URL, e.g. mongodb://localhost:27017")

    delete_parser = conn_sub.add_parser("delete", help="Delete a saved connection")
    delete_parser.add_argument("connection_name", help="Name of the connection to delete")
    return parser


def runtime_from_args(args: argparse.Namespace) -> RuntimeConfig:
    runtime = RuntimeConfig.from_env()
    if args.page_size is not None and args.page_size > 0:
        runtime.page_size = args.page_size
    if args.log_file is not None:
        runtime.log_file = args.log_file
    if args.config_dir is not None:
        runtime.config_dir = args.config_dir
    if args.debug:
        runtime.debug_mode = True
    if args.mock:
        runtime.mock = True
    return runtime


CONNECTION_COMMANDS = {
    "list": cmd_connection_list,
    "add": cmd_connection_add,
    "delete": cmd_connection_delete,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.collection and not args.database:
        parser.error("--collection requires --database")

    runtime = runtime_from_args(args)
    configure_logging(runtime.log_file, debug=runtime.debug_mode)
    services = build_app_services(runtime)

    if args.command == "connection":
        return CONNECTION_COMMANDS[args.conn_command](args, services)

    from mongotab.domains.shell.app.startup import StartupOptions
    from mongotab.domains.shell.ui.host import MongotabApp

    startup = StartupOptions(
        url=args.url,
        connection_name=args.connection_name,
        database=args.database,
        collection=args.collection,
        restore=args.last,
    )
    logger.info("Starting mongotab %s", __version__)
    MongotabApp(services=services, startup=startup).run()
    return 0
