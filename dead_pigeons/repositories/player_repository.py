"""Repository layer for Player persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from dead_pigeons.models.player import Player


class PlayerRepository:
    """CRUD operations for Player. Soft-deleted rows are invisible here."""

    def get_by_id(self, session: Session, player_id: int) -> Player | None:
        stmt = select(Player).where(Player.id == player_id, Player.deleted_at.is_(None))
        return session.scalars(stmt).first()

    def email_taken(self, session: Session, email: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(Player.id).where(Player.email == email, Player.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Player.id != exclude_id)
        return session.scalars(stmt.limit(1)).first() is not None

    def list_players(self, session: Session, is_active: bool | None = None) -> Sequence[Player]:
        stmt = select(Player).where(Player.deleted_at.is_(None))
        if is_active is not None:
            stmt = stmt.where(Player.is_active == is_active)
        stmt = stmt.order_by(Player.full_name.asc(), Player.id.asc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, player: Player) -> Player:
        session.add(player)
        session.flush()
        return player
