"""
DevCamper Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Why:   Bootcamps reference their owner here, and the auth dependency loads
       the requesting user from the token subject.

Users are provisioned by the account service. This backend only reads them.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from devcamper.database import Base

USER_ROLE = "user"
PUBLISHER_ROLE = "publisher"
ADMIN_ROLE = "admin"
ROLES = (USER_ROLE, PUBLISHER_ROLE, ADMIN_ROLE)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # One of ROLES; admin bypasses bootcamp ownership checks
    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=USER_ROLE,
        server_default=text(f"'{USER_ROLE}'"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}')>"
