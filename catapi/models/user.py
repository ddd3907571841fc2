"""
Cat Registry API — User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table.
Who:   Used by UserStore for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: non-sequential, safe to expose in URLs
    - email: unique, doubles as the login name
    - role: 'user' or 'admin'; only ever written server-side
    - password: bcrypt hash, never the plain value and never serialized
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catapi.database import Base

if TYPE_CHECKING:
    from catapi.models.cat import Cat

USER_ROLES = ("user", "admin")


class User(Base):
    """
    Registered account that can own cats.

    Lifecycle:
        1. Created on registration (role forced to 'user') or by the admin CLI
        2. Updated only by its holder (PUT /api/users)
        3. Deleted only by its holder (DELETE /api/users); owned cats go with it
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")

    # bcrypt hash; the column keeps the public field name
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # lazy="raise": async sessions cannot lazy-load, stores load explicitly.
    # passive_deletes: owned cats are removed by the database cascade (and by
    # UserStore explicitly), never loaded just to be deleted.
    cats: Mapped[List["Cat"]] = relationship(
        back_populates="owner",
        lazy="raise",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
