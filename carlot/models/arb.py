from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow

if TYPE_CHECKING:
    from carlot.models.profile import Profile


class VehicleArbRecord(Base):
    """
    Append-only arbitration audit entry.

    Rows are inserted once and never updated or deleted; the history of a
    vehicle is read newest first.
    """
    __tablename__ = "vehicle_arb_records"
    # relationship name -> profile columns exposed when serialized
    __embedded__ = {"created_by_user": ("id", "username", "email")}

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id
    )

    vehicle_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vehicles.id"),
        index=True
    )

    arb_type: Mapped[str] = mapped_column(
        String(20)
    )  # sold, inventory

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True
    )

    created_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True
    )

    created_by_user: Mapped[Profile] = relationship(lazy="joined")
