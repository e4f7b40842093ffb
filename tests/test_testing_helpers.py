"""Tests for perch.testing assertions and the test client cookie jar."""

import pytest

from perch import App, Redirect, Response
from perch.testing import TestClient, assert_page, assert_redirect, page_object


class TestAssertions:
    def test_page_object_from_json(self) -> None:
        response = Response(
            '{"component": "A", "props": {}, "url": "/", "version": null}',
            content_type="application/json",
        )
        assert page_object(response)["component"] == "A"

    def test_assert_page_wrong_component(self) -> None:
        response = Response(
            '{"component": "A", "props": {}, "url": "/", "version": null}',
            content_type="application/json",
        )
        with pytest.raises(AssertionError, match="'B'"):
            assert_page(response, "B")

    def test_plain_html_has_no_page(self) -> None:
        with pytest.raises(AssertionError, match="no page object"):
            page_object(Response("<p>plain</p>"))

    def test_assert_redirect(self) -> None:
        response = Response(status=302).with_header("Location", "/login?next=%2F")
        assert assert_redirect(response, "/login") == "/login?next=%2F"
        with pytest.raises(AssertionError):
            assert_redirect(response, "/elsewhere")
        with pytest.raises(AssertionError):
            assert_redirect(Response(), "/")


class TestCookieJar:
    async def test_cookies_round_trip_and_expire(self) -> None:
        app = App()

        @app.get("/set")
        def set_cookie():
            return Response("set").with_cookie("flavor", "oat")

        @app.get("/clear")
        def clear_cookie():
            return Response("cleared").with_cookie("flavor", "", max_age=0)

        @app.get("/read")
        def read(request):
            return request.cookies.get("flavor", "none")

        async with TestClient(app) as client:
            await client.get("/set")
            assert client.cookies == {"flavor": "oat"}
            assert (await client.get("/read")).text == "oat"
            await client.get("/clear")
            assert (await client.get("/read")).text == "none"

    async def test_redirects_are_not_followed(self) -> None:
        app = App()

        @app.get("/old")
        def old():
            return Redirect("/new")

        async with TestClient(app) as client:
            response = await client.get("/old")
        assert_redirect(response, "/new")
