"""In-memory user store for the starter app."""

import hashlib
import hmac
from dataclasses import dataclass, replace
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    password: str
    email_verified_at: str | None = None
    is_authenticated: bool = True

    @property
    def verification_hash(self) -> str:
        return hashlib.sha1(self.email.encode("utf-8")).hexdigest()

    def public(self) -> dict[str, str | None]:
        """Props-safe view of the user (no password)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "email_verified_at": self.email_verified_at,
        }


class UserStore:
    """Users keyed by ID. One instance per app."""

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: dict[str, User] = {u.id: u for u in users or []}

    def get(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def authenticate(self, email: str, password: str) -> User | None:
        for user in self._users.values():
            if user.email == email and hmac.compare_digest(user.password, password):
                return user
        return None

    def save(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def mark_verified(self, user: User) -> User:
        if user.email_verified_at:
            return user
        return self.save(replace(user, email_verified_at=datetime.now(UTC).isoformat()))
