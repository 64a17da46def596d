"""Identity of the administrator performing a moderation action."""

from dataclasses import dataclass
from typing import Protocol


class _HasIdentity(Protocol):
    id: int
    username: str
    role: str


@dataclass(frozen=True)
class AdminActor:
    """Who is acting, passed explicitly to every moderation operation.

    Used for the self-modification guards and for audit attribution.  It is
    a plain value rather than an ORM instance so it stays valid across
    transaction rollbacks.
    """

    id: int
    username: str
    role: str = "ADMIN"

    @classmethod
    def from_user(cls, user: _HasIdentity) -> "AdminActor":
        """Build an actor from an authenticated account."""
        return cls(id=user.id, username=user.username, role=str(user.role))
