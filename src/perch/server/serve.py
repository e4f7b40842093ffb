"""Serve a live perch App with pounce.

Pounce's ``run()`` takes an import string, but ``App.run()`` has a live
object, so we drive ``pounce.Server`` directly with the ASGI callable.
"""

import logging
from typing import Any

logger = logging.getLogger("perch.server")


def configure_logging(level: str) -> None:
    """Install a basic stderr handler at *level* unless logging is already set up."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def run_server(
    app: Any,
    host: str,
    port: int,
    *,
    reload: bool = False,
    workers: int = 1,
    app_path: str | None = None,
) -> None:
    """Start a pounce server for *app*.

    Args:
        app: ASGI callable (perch App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes (development).
        workers: Worker count; forced to 1 when reloading.
        app_path: Optional ``"module:attribute"`` import string so pounce
            can reimport the app on each reload cycle.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
    )
    logger.info("Serving on http://%s:%d (workers=%d)", host, port, config.workers)
    Server(config, app, app_path=app_path).run()
