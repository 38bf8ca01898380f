from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow


class Profile(Base):
    """Application user; role drives coarse authorization."""
    __tablename__ = "profiles"
    __hidden__ = ("password",)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id
    )

    email: Mapped[str] = mapped_column(
        String,
        unique=True,
        index=True
    )

    username: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True
    )

    role: Mapped[str] = mapped_column(
        String(20),
        default="seller"
    )  # admin, seller, transporter

    status: Mapped[str] = mapped_column(
        String(20),
        default="active"
    )  # active, inactive

    password: Mapped[str] = mapped_column(
        String
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )
