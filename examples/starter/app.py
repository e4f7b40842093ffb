"""Starter app — health check, welcome page, and a guarded dashboard.

Demonstrates the full routing surface: a raw ``text/plain`` route,
page renders, the ``auth`` and ``verified`` route guards, and two
route batches (settings and auth) included from separate modules.

Demo accounts: ``ada@example.com`` (verified) and
``bob@example.com`` (unverified); password ``secret`` for both.

Run:
    python app.py
"""

from perch import App, AppConfig, Response, render
from perch.middleware import AuthConfig, AuthMiddleware, SessionConfig, SessionMiddleware

from auth_routes import auth_routes
from settings_routes import settings_routes
from users import User, UserStore

config = AppConfig(secret_key="starter-dev-secret", title="Starter", asset_version="1")
app = App(config)

users = UserStore(
    [
        User("1", "Ada", "ada@example.com", "secret", email_verified_at="2024-01-01T00:00:00+00:00"),
        User("2", "Bob", "bob@example.com", "secret"),
    ]
)

app.add_middleware(SessionMiddleware(SessionConfig(secret_key=config.secret_key)))
app.add_middleware(AuthMiddleware(AuthConfig(load_user=users.get)))


# Health check route for deployment debugging
@app.get("/health")
def health():
    return Response("OK", content_type="text/plain")


@app.get("/", name="home")
def home():
    return render("Welcome")


@app.get("dashboard", name="dashboard", middleware=("auth", "verified"))
def dashboard():
    return render("Dashboard")


app.include(settings_routes())
app.include(auth_routes(users))


if __name__ == "__main__":
    app.run()
