"""Repository layer for Board persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dead_pigeons.models.board import Board
from dead_pigeons.models.game import Game


class BoardRepository:
    """Queries over purchased boards."""

    def get_by_id(self, session: Session, board_id: int) -> Board | None:
        return session.get(Board, board_id)

    def list_for_game(self, session: Session, game_id: int) -> Sequence[Board]:
        stmt = select(Board).where(Board.game_id == game_id).order_by(Board.created_at.asc(), Board.id.asc())
        return list(session.scalars(stmt).all())

    def list_for_player(self, session: Session, player_id: int) -> Sequence[Board]:
        stmt = select(Board).where(Board.player_id == player_id).order_by(Board.created_at.asc(), Board.id.asc())
        return list(session.scalars(stmt).all())

    def list_history_for_player(self, session: Session, player_id: int) -> Sequence[tuple[Board, Game]]:
        """Boards joined with their round, newest round first."""

        stmt = (
            select(Board, Game)
            .join(Game, Board.game_id == Game.id)
            .where(Board.player_id == player_id)
            .order_by(Game.year.desc(), Game.week_number.desc(), Board.created_at.asc(), Board.id.asc())
        )
        return [(board, game) for board, game in session.execute(stmt).all()]

    def list_renewable(self, session: Session, game_id: int) -> Sequence[Board]:
        stmt = (
            select(Board)
            .where(Board.game_id == game_id, Board.repeat_active.is_(True), Board.repeat_weeks > 0)
            .order_by(Board.created_at.asc(), Board.id.asc())
        )
        return list(session.scalars(stmt).all())

    def renewal_exists(self, session: Session, source_board_id: int, target_game_id: int) -> bool:
        stmt = select(Board.id).where(Board.renewed_from_id == source_board_id, Board.game_id == target_game_id)
        return session.scalars(stmt.limit(1)).first() is not None

    def total_spent(self, session: Session, player_id: int) -> int:
        stmt = select(func.coalesce(func.sum(Board.price), 0)).where(Board.player_id == player_id)
        return int(session.scalar(stmt) or 0)

    def create(self, session: Session, board: Board) -> Board:
        session.add(board)
        # Flushed so the ledger sees this board on the next balance read.
        session.flush()
        return board
