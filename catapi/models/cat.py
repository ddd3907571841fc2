"""
Cat Registry API — Cat SQLAlchemy Model
========================================

What:  ORM model representing the `cats` table.
Who:   Used by CatStore for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - owner_id: required FK to users; ON DELETE CASCADE so a removed user
      never leaves cats pointing at nothing
    - filename: relative path (from STORAGE_ROOT) of the uploaded image
    - longitude / latitude: the location point split in two float columns.
      Bounding-box searches are inclusive range predicates on both columns,
      served by idx_cats_location.
"""

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catapi.database import Base

if TYPE_CHECKING:
    from catapi.models.user import User


class Cat(Base):
    """
    A cat owned by exactly one user.

    Query Patterns:
        - List by owner: WHERE owner_id = :caller
        - Owner-scoped mutation: WHERE id = :id AND owner_id = :caller
        - Bounding box: WHERE longitude BETWEEN :x1 AND :x2 AND latitude BETWEEN :y1 AND :y2
    """

    __tablename__ = "cats"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    cat_name: Mapped[str] = mapped_column(String(255), nullable=False)

    weight: Mapped[float] = mapped_column(Float, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    birthdate: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    owner: Mapped["User"] = relationship(back_populates="cats", lazy="raise")

    __table_args__ = (
        Index("idx_cats_location", "longitude", "latitude"),
    )

    @property
    def location(self) -> List[float]:
        """The point as [longitude, latitude]."""
        return [self.longitude, self.latitude]

    def __repr__(self) -> str:
        return f"<Cat(id={self.id}, cat_name='{self.cat_name}', owner_id={self.owner_id})>"
