"""Compiled router with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. Matching is strictly
first-registered-first-matched: the trie narrows the candidates, and
the earliest registered route that accepts the method wins. When two
routes share a method and pattern, the later one is never matched.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import quote

from perch.errors import ConfigurationError, DuplicateRouteName, MethodNotAllowed, NotFound
from perch.routing.params import CONVERTERS
from perch.routing.route import PathSegment, Route, RouteMatch

logger = logging.getLogger("perch.routing")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "dashboard"       -> [PathSegment("dashboard")]
        "/users/{id:int}" -> [PathSegment("users"), PathSegment("{id:int}", is_param=True, ...)]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> syntax. "
                "Perch path parameters are written as {param} or {param:type}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            param_name, _, param_type = part[1:-1].partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in route {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_alls", "children", "param_edges", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter edges, one per (converter, name), in registration order
        self.param_edges: list[_ParamEdge] = []
        # Catch-all edges (path converter), consume the rest of the path
        self.catch_alls: list[_CatchAllEdge] = []
        # method -> (registration index, route)
        self.routes_by_method: dict[str, tuple[int, Route]] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode = field(default_factory=_TrieNode)


@dataclass(slots=True)
class _CatchAllEdge:
    param_name: str
    node: _TrieNode = field(default_factory=_TrieNode)


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/", index, frozenset({"GET"}), name="home"))
        router.add(Route("/users/{id:int}", show_user, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
        router.url_for("home")  # "/"
    """

    __slots__ = ("_compiled", "_names", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: list[Route] = []
        self._names: dict[str, Route] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Append a route. Must be called before compile().

        Raises ``DuplicateRouteName`` if the route's name is taken.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if route.name is not None:
            existing = self._names.get(route.name)
            if existing is not None:
                raise DuplicateRouteName(route.name, existing.path, route.path)

        segments = parse_path(route.path)
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                node = self._catch_all_edge(node, seg.param_name or "path").node
                break
            if seg.is_param:
                node = self._param_edge(node, seg.param_name or "", seg.param_type).node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        index = len(self._routes)
        for method in route.methods:
            if method in node.routes_by_method:
                logger.warning(
                    "Route %s %s shadowed by earlier registration of %r",
                    method,
                    route.path,
                    node.routes_by_method[method][1].path,
                )
                continue
            node.routes_by_method[method] = (index, route)

        self._routes.append(route)
        if route.name is not None:
            self._names[route.name] = route

    @staticmethod
    def _param_edge(node: _TrieNode, name: str, param_type: str) -> _ParamEdge:
        for edge in node.param_edges:
            if edge.param_name == name and edge.param_type == param_type:
                return edge
        pattern, _ = CONVERTERS[param_type]
        edge = _ParamEdge(param_name=name, param_type=param_type, regex=re.compile(f"^{pattern}$"))
        node.param_edges.append(edge)
        return edge

    @staticmethod
    def _catch_all_edge(node: _TrieNode, name: str) -> _CatchAllEdge:
        for edge in node.catch_alls:
            if edge.param_name == name:
                return edge
        edge = _CatchAllEdge(param_name=name)
        node.catch_alls.append(edge)
        return edge

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    def lookup(self, method: str, path: str) -> RouteMatch | None:
        """Return the first registered route matching *method* and *path*, or ``None``."""
        try:
            return self.match(method, path)
        except (NotFound, MethodNotAllowed):
            return None

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Every trie node the path reaches is a candidate; the route with
        the lowest registration index that accepts *method* wins (HEAD
        falls back to GET).

        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        candidates: list[tuple[_TrieNode, dict[str, str]]] = []
        self._collect(self._root, parts, 0, {}, candidates)

        if not candidates:
            raise NotFound(f"No route matches {method} {path!r}")

        best: tuple[int, Route, dict[str, str]] | None = None
        for node, params in candidates:
            entry = node.routes_by_method.get(method)
            if entry is None and method == "HEAD":
                entry = node.routes_by_method.get("GET")
            if entry is not None and (best is None or entry[0] < best[0]):
                best = (entry[0], entry[1], params)

        if best is not None:
            return RouteMatch(route=best[1], path_params=best[2])

        allowed: set[str] = set()
        for node, _ in candidates:
            allowed.update(node.routes_by_method)
        raise MethodNotAllowed(frozenset(allowed))

    def _collect(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
        out: list[tuple[_TrieNode, dict[str, str]]],
    ) -> None:
        """Append every node with routes that matches the remaining path parts."""
        for edge in node.catch_alls:
            if index < len(parts) and edge.node.routes_by_method:
                remaining = "/".join(parts[index:])
                out.append((edge.node, {**params, edge.param_name: remaining}))

        if index == len(parts):
            if node.routes_by_method:
                out.append((node, params))
            return

        part = parts[index]
        child = node.children.get(part)
        if child is not None:
            self._collect(child, parts, index + 1, params, out)

        for edge in node.param_edges:
            if edge.regex.match(part):
                self._collect(edge.node, parts, index + 1, {**params, edge.param_name: part}, out)

    # -- URL generation --

    def url_for(self, name: str, /, **params: object) -> str:
        """Build the path of a named route, filling ``{param}`` segments.

        Raises ``ConfigurationError`` for unknown names or missing params.
        """
        route = self._names.get(name)
        if route is None:
            msg = f"No route named {name!r}."
            raise ConfigurationError(msg)

        parts: list[str] = []
        for seg in parse_path(route.path):
            if not seg.is_param:
                parts.append(seg.value)
                continue
            if seg.param_name not in params:
                msg = f"Route {name!r} requires parameter {seg.param_name!r}."
                raise ConfigurationError(msg)
            value = str(params[seg.param_name])
            safe = "/" if seg.param_type == "path" else ""
            parts.append(quote(value, safe=safe))
        return "/" + "/".join(parts)
