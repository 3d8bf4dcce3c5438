"""Board ORM model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dead_pigeons.models.base import Base


class Board(Base):
    """A player's set of numbers for one round.

    ``numbers`` and ``price`` are fixed at creation. ``is_winning`` stays
    NULL until the owning round is settled. A renewed board points at the
    board it was copied from; ``(renewed_from_id, game_id)`` is unique so a
    source board is carried into a given round at most once.
    """

    __tablename__ = "boards"
    __table_args__ = (UniqueConstraint("renewed_from_id", "game_id", name="uq_boards_renewal"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    numbers: Mapped[list[int]] = mapped_column(JSON, nullable=False)  # sorted, 5..8 values
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    is_winning: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    repeat_weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    repeat_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    renewed_from_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("boards.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
