"""Stackpeek CLI: serve the inspection pages, list routes, print a snapshot.

Entry point registered as ``stackpeek`` in ``pyproject.toml``::

    [project.scripts]
    stackpeek = "stackpeek.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``stackpeek`` command."""
    parser = argparse.ArgumentParser(
        prog="stackpeek",
        description="Stackpeek: a runtime inspection page for Python web apps.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for stackpeek loggers",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- stackpeek run ----------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an app (or the standalone page)")
    run_parser.add_argument(
        "app",
        nargs="?",
        default=None,
        help="Import string (e.g. myapp:app). Omit to serve the standalone stack page.",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--no-mount",
        action="store_true",
        help="Do not mount the inspector pages on the app",
    )

    # -- stackpeek routes -------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- stackpeek snapshot -----------------------------------------------
    snapshot_parser = subparsers.add_parser(
        "snapshot", help="Print the stack page as HTML to stdout"
    )
    snapshot_parser.add_argument(
        "-o", "--output", default=None, help="Write to this file instead of stdout"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from stackpeek.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from stackpeek.cli._routes import run_routes

        run_routes(args)
    elif args.command == "snapshot":
        from stackpeek.cli._snapshot import run_snapshot

        run_snapshot(args)
