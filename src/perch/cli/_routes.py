"""``perch routes`` — list registered routes.

Prints METHOD, PATH, NAME, MIDDLEWARE and HANDLER for every route in
registration order (the order routes are matched in).
"""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.routing.route import Route


def format_routes(routes: list[Route]) -> list[str]:
    """Render routes as aligned table lines, header first."""
    rows = [("METHOD", "PATH", "NAME", "MIDDLEWARE", "HANDLER")]
    for route in routes:
        rows.append(
            (
                "|".join(sorted(route.methods)),
                route.path,
                route.name or "",
                ", ".join(route.middleware_names),
                getattr(route.handler, "__qualname__", repr(route.handler)),
            )
        )
    widths = [max(len(row[i]) for row in rows) for i in range(4)]
    return [
        "  ".join(cell.ljust(width) for cell, width in zip(row[:4], widths, strict=True))
        + "  "
        + row[4]
        for row in rows
    ]


def run_routes(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return
    for line in format_routes(routes):
        print(line)
