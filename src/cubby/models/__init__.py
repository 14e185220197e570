"""SQLModel database models for Cubby."""

from cubby.models.shares import Share
from cubby.models.users import User

__all__ = [
    "Share",
    "User",
]
