"""``stackpeek snapshot``: render the stack page without a server."""

import argparse
import sys
from pathlib import Path

from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.errors import ConfigurationError


def run_snapshot(args: argparse.Namespace) -> None:
    """Write the standalone stack page to stdout or ``args.output``."""
    from stackpeek.dashboard import build_stack_page

    try:
        page = build_stack_page(AppConfig.from_env(), InspectorConfig.from_env())
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.output:
        Path(args.output).write_text(page, encoding="utf-8")
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(page)
        sys.stdout.write("\n")
