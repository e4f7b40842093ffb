"""Settings pages — every route requires a logged-in user."""

from perch import Redirect, RouteGroup, render
from perch.middleware.auth import current_user


def settings_routes() -> RouteGroup:
    group = RouteGroup("settings", middleware=("auth",), name_prefix="settings.")

    @group.get("/")
    def settings_index():
        return Redirect("/settings/profile")

    @group.get("profile", name="profile")
    def profile(request):
        return render(
            "settings/Profile",
            mustVerifyEmail=True,
            status=request.query.get("status"),
            user=current_user().public(),
        )

    @group.get("password", name="password")
    def password():
        return render("settings/Password")

    @group.get("appearance", name="appearance")
    def appearance():
        return render("settings/Appearance")

    return group
