"""
Customer API — Customer SQLAlchemy Model
=========================================

What:  ORM model representing the `customers` table (the customer collection).
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by ResourceRepository for CRUD operations.

Table Design Rationale:
    - UUID primary key: assigned once at insert, never reassigned
    - created_at: stamped at insert, immutable afterwards
    - updated_at: NULL until the first update, then stamped on every update
    - No secondary indexes; every lookup goes through the primary key
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from customer_api.database import Base

# Largest value the 32-bit INTEGER column holds
MAX_LOYALTY_POINTS = 2_147_483_647


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Customer(Base):
    """A customer record."""

    __tablename__ = "customers"

    # ── Primary Key ───────────────────────────────────────────────────────
    # Uuid maps to native UUID on PostgreSQL and CHAR(32) elsewhere
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Store-assigned identifier, immutable once created",
    )

    # ── Domain Fields ─────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Customer display name",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(320),
        nullable=True,
        comment="Contact e-mail address",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-form notes about the customer",
    )

    loyalty_points: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Accumulated loyalty points",
    )

    birth_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Date of birth",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this customer was created (UTC)",
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When this customer was last updated (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}')>"
