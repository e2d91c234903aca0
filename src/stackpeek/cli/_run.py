"""``stackpeek run``: serve an app with the inspector mounted.

Without an import string, serves the standalone stack page at ``/``.
"""

import argparse
import sys

from stackpeek.cli._resolve import resolve_app
from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` (or build the standalone app) and serve it."""
    from stackpeek.dashboard import create_app, mount_inspector

    try:
        inspector = InspectorConfig.from_env()
        if args.app is None:
            app = create_app(inspector, AppConfig.from_env())
        else:
            app = resolve_app(args.app)
            if not args.no_mount:
                mount_inspector(app, inspector)
    except (ModuleNotFoundError, AttributeError, TypeError, RuntimeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run(args.host, args.port)
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
