"""Login, logout and email verification pages."""

from urllib.parse import urlsplit

from perch import Redirect, RouteGroup, render
from perch.middleware.auth import login, logout

from users import UserStore


def _safe_next(target: str | None) -> str:
    """Only follow same-site relative redirect targets."""
    if not target:
        return "/dashboard"
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or not target.startswith("/"):
        return "/dashboard"
    return target


def auth_routes(users: UserStore) -> RouteGroup:
    group = RouteGroup()

    @group.get("login", name="login")
    def login_page(request):
        return render("auth/Login", canResetPassword=False, next=request.query.get("next"))

    @group.post("login")
    async def login_submit(request):
        form = await request.form()
        user = users.authenticate(form.get("email", ""), form.get("password", ""))
        if user is None:
            return render(
                "auth/Login",
                errors={"email": "These credentials do not match our records."},
            ), 422
        login(user)
        return Redirect(_safe_next(form.get("next")))

    @group.post("logout", name="logout", middleware=("auth",))
    def logout_submit():
        logout()
        return Redirect("/")

    @group.get("verify-email", name="verification.notice", middleware=("auth",))
    def verify_notice(user):
        return render("auth/VerifyEmail", email=user.email)

    @group.get("verify-email/{id}/{hash}", name="verification.verify", middleware=("auth",))
    def verify(user, id: str, hash: str):
        if user.id != id or user.verification_hash != hash:
            return "Invalid verification link.", 403
        users.mark_verified(user)
        return Redirect("/dashboard?verified=1")

    return group
