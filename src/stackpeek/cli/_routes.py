"""``stackpeek routes``: list registered routes.

Prints the same rows as the route table on the framework page, sorted
by path.
"""

import argparse
import sys

from stackpeek.cli._resolve import resolve_app
from stackpeek.facts.framework import collect_routes


def run_routes(args: argparse.Namespace) -> None:
    """Print METHOD, PATH, NAME, HANDLER and MIDDLEWARE for every route."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = collect_routes(app)
    if not routes:
        print("No routes registered.")
        return

    rows = [
        (
            r.method_label,
            r.path,
            r.name or "-",
            r.handler,
            ", ".join(r.middleware) or "-",
        )
        for r in routes
    ]
    headers = ("METHOD", "PATH", "NAME", "HANDLER", "MIDDLEWARE")
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"
    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 100))
    for row in rows:
        print(fmt.format(*row))
