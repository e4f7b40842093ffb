"""``perch run`` — serve an app with pounce."""

import argparse
import sys

from perch.cli._resolve import resolve_app


def run(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from perch.server.serve import configure_logging, run_server

    configure_logging(app.config.log_level)
    app.freeze()
    reload = args.reload or app.config.debug
    run_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=reload,
        workers=app.config.workers,
        app_path=args.app if reload else None,
    )
