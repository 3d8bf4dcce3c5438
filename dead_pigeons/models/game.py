"""Game (weekly round) ORM model.

At most one row may have ``is_active = true``; the partial unique index
below makes the database refuse a second one.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, SmallInteger, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from dead_pigeons.models.base import Base


class Game(Base):
    """One week's round."""

    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("year", "week_number", name="uq_games_year_week"),
        Index(
            "uq_games_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # Sorted ascending; NULL until the round is closed.
    winning_numbers: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None
