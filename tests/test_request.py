"""Tests for the immutable Request."""

import pytest

from perch import Request
from perch.http.headers import Headers


def _scope(**overrides):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/login",
        "query_string": b"next=%2Fdashboard&tag=a&tag=b",
        "headers": [
            (b"content-type", b"application/x-www-form-urlencoded"),
            (b"cookie", b"a=1; b=2"),
            (b"x-inertia", b"true"),
        ],
        "client": ("127.0.0.1", 5000),
    }
    scope.update(overrides)
    return scope


def _receive(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive():
        return messages.pop(0)

    return receive


class TestFromAsgi:
    def test_metadata(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.method == "POST"
        assert request.path == "/login"
        assert request.query["next"] == "/dashboard"
        assert request.query.get_list("tag") == ["a", "b"]
        assert request.cookies == {"a": "1", "b": "2"}
        assert request.client == ("127.0.0.1", 5000)
        assert request.user is None

    def test_url_includes_query(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.url == "/login?next=%2Fdashboard&tag=a&tag=b"

    def test_page_visit(self) -> None:
        assert Request.from_asgi(_scope(), _receive(b"")).is_page_visit
        assert not Request.from_asgi(_scope(headers=[]), _receive(b"")).is_page_visit


class TestBody:
    async def test_chunks_joined_and_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b"email=a%40b.c", b"&password=x"))
        assert await request.body() == b"email=a%40b.c&password=x"
        assert await request.body() == b"email=a%40b.c&password=x"

    async def test_form(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b"email=a%40b.c&password=x"))
        form = await request.form()
        assert form["email"] == "a@b.c"
        assert form.get("missing") is None

    async def test_form_rejects_other_types(self) -> None:
        scope = _scope(headers=[(b"content-type", b"multipart/form-data; boundary=x")])
        request = Request.from_asgi(scope, _receive(b""))
        with pytest.raises(ValueError, match="multipart"):
            await request.form()

    async def test_json(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b'{"a": [1]}'))
        assert await request.json() == {"a": [1]}

    async def test_text(self) -> None:
        request = Request.from_asgi(_scope(), _receive("caf\u00e9".encode()))
        assert await request.text() == "caf\u00e9"


class TestDerived:
    def test_with_user_is_a_copy(self) -> None:
        request = Request(method="GET", path="/")
        derived = request.with_user("ada")
        assert derived.user == "ada"
        assert request.user is None

    def test_with_path_params(self) -> None:
        request = Request(method="GET", path="/").with_path_params({"id": "1"})
        assert request.path_params == {"id": "1"}


class TestWantsJson:
    @pytest.mark.parametrize(
        ("headers", "expected"),
        [
            ({}, False),
            ({"Accept": "text/html"}, False),
            ({"Accept": "application/json"}, True),
            ({"Accept": "text/html, application/json"}, False),
            ({"Authorization": "Bearer x"}, True),
        ],
    )
    def test_wants_json(self, headers: dict[str, str], expected: bool) -> None:
        request = Request(method="GET", path="/", headers=Headers.from_dict(headers))
        assert request.wants_json is expected
