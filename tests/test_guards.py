"""Tests for the auth and verified route guards."""

from dataclasses import dataclass

from perch import App, Request, Response, render
from perch.http.headers import Headers
from perch.middleware.auth import ANONYMOUS
from perch.middleware.guards import Authenticate, EnsureVerified, is_verified
from perch.testing import TestClient, assert_page, assert_redirect


@dataclass(frozen=True)
class _User:
    id: str = "1"
    is_authenticated: bool = True
    email_verified_at: str | None = None


VERIFIED = _User(email_verified_at="2024-01-01")
UNVERIFIED = _User()


def _request(user=None, headers: dict[str, str] | None = None, path: str = "/dashboard") -> Request:
    return Request(method="GET", path=path, headers=Headers.from_dict(headers or {}), user=user)


async def _endpoint(request: Request) -> Response:
    return Response("reached")


class TestIsVerified:
    def test_timestamp(self) -> None:
        assert is_verified(VERIFIED)
        assert not is_verified(UNVERIFIED)

    def test_flag(self) -> None:
        assert not is_verified(ANONYMOUS)

        @dataclass
        class Flagged:
            is_verified: bool = True

        assert is_verified(Flagged())


class TestAuthenticate:
    async def test_passes_authenticated(self) -> None:
        response = await Authenticate()(_request(VERIFIED), _endpoint)
        assert response.text == "reached"

    async def test_browser_redirected_with_next(self) -> None:
        response = await Authenticate("/login")(_request(None), _endpoint)
        assert response.status == 302
        assert response.header("Location") == "/login?next=%2Fdashboard"

    async def test_anonymous_sentinel_is_rejected(self) -> None:
        response = await Authenticate()(_request(ANONYMOUS), _endpoint)
        assert response.status == 302

    async def test_login_url_with_query(self) -> None:
        guard = Authenticate("/login?via=guard")
        assert guard.redirect_url(_request()) == "/login?via=guard&next=%2Fdashboard"

    async def test_api_client_gets_401(self) -> None:
        request = _request(None, {"Accept": "application/json"})
        response = await Authenticate()(request, _endpoint)
        assert response.status == 401
        assert response.content_type == "application/json"

    async def test_bearer_client_gets_401(self) -> None:
        request = _request(None, {"Authorization": "Bearer nope"})
        response = await Authenticate()(request, _endpoint)
        assert response.status == 401

    async def test_page_visit_gets_409(self) -> None:
        request = _request(None, {"X-Inertia": "true"})
        response = await Authenticate("/login")(request, _endpoint)
        assert response.status == 409
        assert response.header("X-Inertia-Location") == "/login?next=%2Fdashboard"


class TestEnsureVerified:
    async def test_passes_verified(self) -> None:
        response = await EnsureVerified()(_request(VERIFIED), _endpoint)
        assert response.text == "reached"

    async def test_unverified_redirected(self) -> None:
        response = await EnsureVerified("/verify-email")(_request(UNVERIFIED), _endpoint)
        assert response.status == 302
        assert response.header("Location") == "/verify-email"

    async def test_anonymous_is_unverified(self) -> None:
        response = await EnsureVerified()(_request(None), _endpoint)
        assert response.status == 302

    async def test_api_client_gets_403(self) -> None:
        request = _request(UNVERIFIED, {"Accept": "application/json"})
        response = await EnsureVerified()(request, _endpoint)
        assert response.status == 403


class TestGuardAliases:
    async def test_builtin_aliases(self) -> None:
        app = App()
        seen: list[object] = []

        async def attach(request: Request, next) -> Response:
            return await next(request.with_user(VERIFIED))

        app.add_middleware(attach)

        @app.get("dashboard", middleware=("auth", "verified"))
        def dashboard(user):
            seen.append(user)
            return render("Dashboard")

        async with TestClient(app) as client:
            response = await client.get("/dashboard")
        assert_page(response, "Dashboard", {})
        assert seen == [VERIFIED]

    async def test_guard_order_auth_first(self) -> None:
        app = App()

        @app.get("dashboard", middleware=("auth", "verified"))
        def dashboard():
            return render("Dashboard")

        async with TestClient(app) as client:
            response = await client.get("/dashboard")
        assert_redirect(response, "/login")

    async def test_custom_urls_from_config(self) -> None:
        from perch import AppConfig

        app = App(AppConfig(login_url="/signin"))

        @app.get("dashboard", middleware=("auth",))
        def dashboard():
            return render("Dashboard")

        async with TestClient(app) as client:
            response = await client.get("/dashboard")
        assert_redirect(response, "/signin?next=")
