"""
Explicit user context handed to the set creation wizard and study sessions.
"""

from dataclasses import dataclass

from app.auth.models import User


@dataclass(frozen=True)
class UserContext:
    """The authenticated caller, detached from any database session."""

    user_id: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserContext":
        return cls(user_id=user.id, email=user.email)
