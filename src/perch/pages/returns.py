"""PageRender return type and the ``render`` / ``lazy`` helpers."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PageRender:
    """Render client view *component* with *props*.

    Handlers return this instead of a body; the dispatcher never looks
    at how it becomes bytes.
    """

    component: str
    props: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Lazy:
    """A prop evaluated only when a partial reload asks for it by name."""

    factory: Callable[[], Any]


def lazy(factory: Callable[[], Any]) -> Lazy:
    """Mark a prop as lazy::

        return render("Users", users=lazy(load_users))
    """
    return Lazy(factory)


def render(component: str, props: Mapping[str, Any] | None = None, /, **kwargs: Any) -> PageRender:
    """Build a ``PageRender``. Keyword props override mapping props.

    Usage::

        return render("Dashboard")
        return render("settings/Profile", {"user": user}, status="saved")
    """
    merged = {**(props or {}), **kwargs}
    return PageRender(component, merged)
