"""
DevCamper Backend — Bootcamp SQLAlchemy Model
===============================================

What:  ORM model representing the `bootcamps` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by BootcampService and the listing query builder.

Table Design:
    - UUID primary key, system assigned
    - user_id: owner; at most one bootcamp per non-admin owner (enforced by
      BootcampService at creation time, not by a constraint, since admins may
      own several)
    - Location is flattened into columns (latitude/longitude plus the
      formatted address parts returned by the geocoder). The API exposes it
      as a GeoJSON-like point.
    - careers is stored as JSON so the same model works on PostgreSQL and SQLite

    Index on (latitude, longitude):
        Radius search prefilters on a bounding box before the exact
        great-circle test, so both coordinates are range-scanned together.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from devcamper.database import Base
from devcamper.models.user import User

DEFAULT_PHOTO = "no-photo.jpg"

CAREERS = (
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
)


class Bootcamp(Base):
    """
    A bootcamp listed in the directory.

    Lifecycle:
        1. Created by a publisher or admin (owner = creator)
        2. Read by anyone
        3. Updated, re-photographed or deleted by its owner or an admin
        4. Deleted permanently (no soft delete)
    """

    __tablename__ = "bootcamps"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey(User.id, ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Location (from the first geocoding candidate of the address) ──────
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    formatted_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    careers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    photo: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=DEFAULT_PHOTO,
        server_default=text(f"'{DEFAULT_PHOTO}'"),
    )

    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_bootcamps_lat_lng", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<Bootcamp(id={self.id}, name='{self.name}', user_id={self.user_id})>"
