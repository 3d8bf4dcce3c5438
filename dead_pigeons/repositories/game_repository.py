"""Repository layer for Game persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from dead_pigeons.models.game import Game


class GameRepository:
    """Queries over weekly rounds."""

    def get_by_id(self, session: Session, game_id: int) -> Game | None:
        return session.get(Game, game_id)

    def get_active(self, session: Session) -> Game | None:
        stmt = select(Game).where(Game.is_active.is_(True)).order_by(Game.year.asc(), Game.week_number.asc())
        return session.scalars(stmt).first()

    def get_latest(self, session: Session) -> Game | None:
        """Most recent round by calendar position, open or closed."""

        stmt = select(Game).order_by(Game.year.desc(), Game.week_number.desc()).limit(1)
        return session.scalars(stmt).first()

    def get_previous(self, session: Session, game: Game) -> Game | None:
        """The round immediately before ``game`` in calendar order."""

        stmt = (
            select(Game)
            .where(
                (Game.year < game.year) | ((Game.year == game.year) & (Game.week_number < game.week_number))
            )
            .order_by(Game.year.desc(), Game.week_number.desc())
            .limit(1)
        )
        return session.scalars(stmt).first()

    def list_closed(self, session: Session) -> Sequence[Game]:
        stmt = (
            select(Game)
            .where(Game.closed_at.is_not(None))
            .order_by(Game.year.desc(), Game.week_number.desc())
        )
        return list(session.scalars(stmt).all())

    def create(self, session: Session, game: Game) -> Game:
        session.add(game)
        session.flush()  # assign PK, surface constraint violations now
        return game
