"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1

    # Security
    secret_key: str = ""

    # Templates (root view for page renders)
    template_dir: str | Path = "templates"
    root_view: str = "app.html"
    title: str = "Perch"
    autoescape: bool = True

    # Page visits
    asset_version: str | None = None

    # Guard redirect targets
    login_url: str = "/login"
    verification_url: str = "/verify-email"

    # Logging
    log_level: str = "info"
