"""Page rendering — handlers return ``render("Component", props)``.

The responder turns a ``PageRender`` into a full HTML document on a
first load, or a JSON page object when the client-side router asks for
one with ``X-Inertia: true``.
"""

from perch.pages.responder import PageResponder
from perch.pages.returns import Lazy, PageRender, lazy, render

__all__ = ["Lazy", "PageRender", "PageResponder", "lazy", "render"]
