"""SQLAlchemy ORM models."""

from catapi.models.cat import Cat
from catapi.models.user import USER_ROLES, User

__all__ = ["Cat", "User", "USER_ROLES"]
