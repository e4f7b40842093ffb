"""Tests for content negotiation — handler return values to responses."""

import pytest

from perch import Redirect, Request, Response
from perch.server.negotiation import negotiate

REQUEST = Request(method="GET", path="/")


class TestNegotiate:
    async def test_response_passthrough(self) -> None:
        original = Response("x", status=201)
        assert await negotiate(original, request=REQUEST) is original

    async def test_str_is_html(self) -> None:
        response = await negotiate("<p>hi</p>", request=REQUEST)
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"

    async def test_bytes(self) -> None:
        response = await negotiate(b"\x00\x01", request=REQUEST)
        assert response.content_type == "application/octet-stream"

    async def test_dict_is_json(self) -> None:
        response = await negotiate({"ok": True}, request=REQUEST)
        assert response.content_type == "application/json"
        assert response.text == '{"ok": true}'

    async def test_list_is_json(self) -> None:
        response = await negotiate([1, 2], request=REQUEST)
        assert response.text == "[1, 2]"

    async def test_redirect(self) -> None:
        response = await negotiate(Redirect("/next", status=303), request=REQUEST)
        assert response.status == 303
        assert response.header("Location") == "/next"

    async def test_status_tuple(self) -> None:
        response = await negotiate(("created", 201), request=REQUEST)
        assert response.status == 201
        assert response.text == "created"

    async def test_status_and_headers_tuple(self) -> None:
        response = await negotiate(("teapot", 418, {"X-Brew": "tea"}), request=REQUEST)
        assert response.status == 418
        assert response.header("X-Brew") == "tea"

    async def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="object"):
            await negotiate(object(), request=REQUEST)
