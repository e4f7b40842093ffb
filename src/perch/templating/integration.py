"""Kida environment setup for the root view.

The environment is created once during ``App.freeze()`` and handed to
the page responder. Templates are looked up in the app's
``template_dir`` first, then in perch's built-in ``templates`` package
directory (which ships a default ``app.html``).
"""

import html
from collections.abc import Callable, Mapping
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader, PackageLoader
from kida.template import Markup

from perch.config import AppConfig
from perch.pages.responder import dump_page


def page_attr(page: Mapping[str, Any]) -> Markup:
    """Serialize a page object for an HTML attribute value.

    Returns HTML-escaped JSON as Markup so the template can embed it
    without double escaping::

        <div id="app" data-page="{{ page | page_attr }}"></div>
    """
    return Markup(html.escape(dump_page(page), quote=True))


def create_environment(
    config: AppConfig,
    globals_: Mapping[str, Any] | None = None,
    filters: Mapping[str, Callable[..., Any]] | None = None,
) -> Environment:
    """Create a kida Environment from app configuration."""
    loader = ChoiceLoader(
        [
            FileSystemLoader(str(config.template_dir)),
            PackageLoader("perch.templating", "templates"),
        ]
    )
    env = Environment(
        loader=loader,
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
    env.update_filters({"page_attr": page_attr, **(filters or {})})
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)
    return env
