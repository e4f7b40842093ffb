"""Tests for perch.routing.router — compiled trie-based router."""

import logging

import pytest

from perch.errors import ConfigurationError, DuplicateRouteName, MethodNotAllowed, NotFound
from perch.routing.route import Route
from perch.routing.router import Router, parse_path


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


def _route(
    path: str,
    methods: frozenset[str] | None = None,
    *,
    name: str | None = None,
    handler=_handler,
) -> Route:
    return Route(path=path, handler=handler, methods=methods or frozenset({"GET"}), name=name)


def _router(*routes: Route) -> Router:
    router = Router()
    for route in routes:
        router.add(route)
    router.compile()
    return router


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/users")
        assert len(segments) == 1
        assert segments[0].value == "users"
        assert segments[0].is_param is False

    def test_relative_pattern(self) -> None:
        assert [s.value for s in parse_path("dashboard")] == ["dashboard"]

    def test_param(self) -> None:
        segments = parse_path("/users/{id}")
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "str"

    def test_typed_param(self) -> None:
        assert parse_path("/users/{id:int}")[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_angle_bracket_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_path("/share/<slug>")
        assert "{param}" in str(exc_info.value)

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="uuid"):
            parse_path("/items/{id:uuid}")


class TestMatching:
    def test_root(self) -> None:
        router = _router(_route("/"))
        assert router.match("GET", "/").route.path == "/"

    def test_leading_slash_is_optional(self) -> None:
        router = _router(_route("dashboard"))
        assert router.match("GET", "/dashboard").route.path == "dashboard"

    def test_trailing_slash_matches(self) -> None:
        router = _router(_route("/settings"))
        assert router.match("GET", "/settings/").route.path == "/settings"

    def test_param_captured(self) -> None:
        router = _router(_route("/users/{id}"))
        match = router.match("GET", "/users/42")
        assert match.path_params == {"id": "42"}

    def test_int_param_rejects_text(self) -> None:
        router = _router(_route("/users/{id:int}"))
        with pytest.raises(NotFound):
            router.match("GET", "/users/abc")

    def test_earlier_param_beats_later_static(self) -> None:
        first = _route("/users/{id}", name="first")
        second = _route("/users/me", name="second", handler=_other)
        router = _router(first, second)
        assert router.match("GET", "/users/me").route is first

    def test_earlier_static_beats_later_param(self) -> None:
        static = _route("/users/me", handler=_other)
        router = _router(static, _route("/users/{id}"))
        assert router.match("GET", "/users/me").route is static
        assert router.match("GET", "/users/7").route.handler is _handler

    def test_earlier_catch_all_beats_later_static(self) -> None:
        catch_all = _route("/files/{rest:path}")
        router = _router(catch_all, _route("/files/readme", handler=_other))
        assert router.match("GET", "/files/readme").route is catch_all

    def test_catch_all(self) -> None:
        router = _router(_route("/files/{rest:path}"))
        match = router.match("GET", "/files/a/b/c.txt")
        assert match.path_params == {"rest": "a/b/c.txt"}

    def test_multiple_params(self) -> None:
        router = _router(_route("/verify-email/{id}/{hash}"))
        match = router.match("GET", "/verify-email/2/abc")
        assert match.path_params == {"id": "2", "hash": "abc"}


class TestMethods:
    def test_not_found(self) -> None:
        router = _router(_route("/"))
        with pytest.raises(NotFound):
            router.match("GET", "/missing")

    def test_method_not_allowed_lists_allow(self) -> None:
        router = _router(_route("/login", frozenset({"GET", "POST"})))
        with pytest.raises(MethodNotAllowed) as exc_info:
            router.match("DELETE", "/login")
        assert exc_info.value.status == 405
        assert dict(exc_info.value.headers)["Allow"] == "GET, POST"

    def test_separate_routes_per_method(self) -> None:
        get = _route("/login", frozenset({"GET"}))
        post = _route("/login", frozenset({"POST"}), handler=_other)
        router = _router(get, post)
        assert router.match("GET", "/login").route is get
        assert router.match("POST", "/login").route is post

    def test_head_falls_back_to_get(self) -> None:
        router = _router(_route("/health"))
        assert router.match("HEAD", "/health").route.path == "/health"

    def test_lookup_returns_none_on_miss(self) -> None:
        router = _router(_route("/"))
        assert router.lookup("GET", "/missing") is None
        assert router.lookup("POST", "/") is None
        assert router.lookup("GET", "/") is not None


class TestRegistration:
    def test_first_registration_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        first = _route("/dup")
        second = _route("/dup", handler=_other)
        with caplog.at_level(logging.WARNING, logger="perch.routing"):
            router = _router(first, second)
        assert router.match("GET", "/dup").route is first
        assert "shadowed" in caplog.text

    def test_static_node_for_other_method_does_not_hide_param(self) -> None:
        me = _route("/users/me", frozenset({"GET"}))
        update = _route("/users/{id}", frozenset({"POST"}), handler=_other)
        router = _router(me, update)
        match = router.lookup("POST", "/users/me")
        assert match is not None
        assert match.route is update
        assert match.path_params == {"id": "me"}

    def test_allow_collects_every_matching_pattern(self) -> None:
        router = _router(
            _route("/users/me", frozenset({"GET"})),
            _route("/users/{id}", frozenset({"POST"})),
        )
        with pytest.raises(MethodNotAllowed) as exc_info:
            router.match("DELETE", "/users/me")
        assert dict(exc_info.value.headers)["Allow"] == "GET, POST"

    def test_two_param_patterns_at_one_level(self) -> None:
        show = _route("/a/{id:int}", frozenset({"GET"}))
        update = _route("/a/{slug}", frozenset({"POST"}), handler=_other)
        router = _router(show, update)
        match = router.lookup("POST", "/a/hello")
        assert match is not None
        assert match.route is update
        assert match.path_params == {"slug": "hello"}
        assert router.match("GET", "/a/42").path_params == {"id": "42"}
        assert router.lookup("GET", "/a/hello") is None

    def test_typed_param_falls_through_to_later_pattern(self) -> None:
        numeric = _route("/a/{id:int}")
        text = _route("/a/{slug}", handler=_other)
        router = _router(numeric, text)
        assert router.match("GET", "/a/7").route is numeric
        assert router.match("GET", "/a/seven").route is text

    def test_routes_keep_registration_order(self) -> None:
        routes = [_route("/b"), _route("/a"), _route("/c")]
        router = _router(*routes)
        assert [r.path for r in router.routes] == ["/b", "/a", "/c"]

    def test_duplicate_name_rejected(self) -> None:
        router = Router()
        router.add(_route("/a", name="home"))
        with pytest.raises(DuplicateRouteName) as exc_info:
            router.add(_route("/b", name="home"))
        assert exc_info.value.name == "home"

    def test_add_after_compile(self) -> None:
        router = _router(_route("/"))
        with pytest.raises(RuntimeError):
            router.add(_route("/late"))


class TestUrlFor:
    def test_static(self) -> None:
        router = _router(_route("dashboard", name="dashboard"))
        assert router.url_for("dashboard") == "/dashboard"

    def test_params_are_quoted(self) -> None:
        router = _router(_route("/users/{name}", name="user"))
        assert router.url_for("user", name="a b/c") == "/users/a%20b%2Fc"

    def test_catch_all_keeps_slashes(self) -> None:
        router = _router(_route("/files/{rest:path}", name="file"))
        assert router.url_for("file", rest="a/b.txt") == "/files/a/b.txt"

    def test_unknown_name(self) -> None:
        router = _router(_route("/"))
        with pytest.raises(ConfigurationError):
            router.url_for("nope")

    def test_missing_param(self) -> None:
        router = _router(_route("/users/{id}", name="user"))
        with pytest.raises(ConfigurationError, match="id"):
            router.url_for("user")
