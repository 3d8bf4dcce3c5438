"""Round manager: the single open round, closing and settling it, and
opening the next one.

Lifecycle of a Game::

    open_next_round()        set_winning_numbers()
    ----------------> ACTIVE ---------------------> CLOSED

Closing is one-way. Closing and settling happen in one database
transaction, as do opening a round and renewing repeating boards into it,
so a failure halfway leaves nothing behind and the call can be retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from dead_pigeons.db import transaction
from dead_pigeons.errors import (
    NoActiveRound,
    PlayerNotFound,
    RoundAlreadyActive,
    RoundAlreadyClosed,
    RoundNotClosed,
    RoundNotFound,
    ValidationError,
)
from dead_pigeons.locks import ROUND_CALENDAR_KEY, lock_active_game, lock_game, process_locks, round_key
from dead_pigeons.models.base import utcnow
from dead_pigeons.models.board import Board
from dead_pigeons.models.game import Game
from dead_pigeons.repositories.board_repository import BoardRepository
from dead_pigeons.repositories.game_repository import GameRepository
from dead_pigeons.repositories.player_repository import PlayerRepository
from dead_pigeons.rules import GameRules
from dead_pigeons.services.board_service import BoardService, RenewalReport
from dead_pigeons.services.win_determination import is_winning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementSummary:
    game_id: int
    week_number: int
    year: int
    winning_numbers: list[int]
    total_boards: int
    winning_boards: int
    # Sum of board prices in the round, before any prize split.
    digital_revenue: int


@dataclass(frozen=True)
class OpenedRound:
    game: Game
    renewal: RenewalReport


@dataclass(frozen=True)
class PlayerHistoryItem:
    game_id: int
    week_number: int
    year: int
    game_closed_at: datetime | None
    winning_numbers: list[int] | None
    board_id: int
    numbers: list[int]
    price: int
    board_created_at: datetime
    is_winning: bool | None


def summarize(game: Game, boards: Iterable[Board]) -> SettlementSummary:
    boards = list(boards)
    return SettlementSummary(
        game_id=game.id,
        week_number=game.week_number,
        year=game.year,
        winning_numbers=list(game.winning_numbers or []),
        total_boards=len(boards),
        winning_boards=sum(1 for b in boards if b.is_winning),
        digital_revenue=sum(b.price for b in boards),
    )


class GameService:
    """Round use-cases."""

    def __init__(
        self,
        rules: GameRules | None = None,
        boards: BoardService | None = None,
        repository: GameRepository | None = None,
        board_repository: BoardRepository | None = None,
        players: PlayerRepository | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._rules = rules or GameRules()
        self._boards = boards or BoardService(rules=self._rules, clock=clock)
        self._repo = repository or GameRepository()
        self._board_repo = board_repository or BoardRepository()
        self._players = players or PlayerRepository()
        self._clock = clock

    def get_active_game(self, session: Session) -> Game:
        game = self._repo.get_active(session)
        if game is None:
            raise NoActiveRound()
        return game

    def get_game(self, session: Session, game_id: int) -> Game:
        game = self._repo.get_by_id(session, game_id)
        if game is None:
            raise RoundNotFound(game_id)
        return game

    def open_next_round(
        self, session: Session, *, week_number: int | None = None, year: int | None = None
    ) -> OpenedRound:
        """Open the round after the most recent one and renew repeating boards into it.

        With no rounds at all this is the bootstrap: the first round is
        ``(week_number, year)`` if given, else the current week. Once rounds
        exist the calendar decides, and an explicit week must match it.
        """

        # held is entered first so the new round stays locked until after the commit.
        with ExitStack() as held, process_locks.hold(ROUND_CALENDAR_KEY), transaction(session):
            active = lock_active_game(session)
            if active is not None:
                raise RoundAlreadyActive(active.id)

            now = self._clock()
            previous = self._repo.get_latest(session)
            if previous is None:
                default_week, default_year = self._rules.week_of(now)
                week = week_number if week_number is not None else default_week
                target_year = year if year is not None else default_year
                if not 1 <= week <= self._rules.weeks_per_year:
                    raise ValidationError(
                        f"Week number must be between 1 and {self._rules.weeks_per_year}",
                        {"week_number": week},
                    )
            else:
                week, target_year = self._rules.next_week(previous.week_number, previous.year)
                if (week_number is not None and week_number != week) or (year is not None and year != target_year):
                    raise ValidationError(
                        f"The next round is week {week} of {target_year}",
                        {"week_number": week_number, "year": year},
                    )

            game = self._repo.create(
                session,
                Game(week_number=week, year=target_year, is_active=True, created_at=now),
            )
            # Purchases into the new round wait until its renewal pass is committed.
            held.enter_context(process_locks.hold(round_key(game.id)))

            if previous is None:
                renewal = RenewalReport(target_game_id=game.id)
            else:
                renewal = self._boards.renew_into(session, previous, game)

        logger.info(
            "Opened game %s (week %s/%s); renewed %s boards, stopped %s chains",
            game.id,
            game.week_number,
            game.year,
            len(renewal.renewed),
            len(renewal.stopped_board_ids),
        )
        return OpenedRound(game=game, renewal=renewal)

    def renew_active_round(self, session: Session) -> RenewalReport:
        """Re-run the renewal pass into the open round.

        Boards already carried over are skipped, so this only fills gaps
        left by an interrupted pass.
        """

        with ExitStack() as held, process_locks.hold(ROUND_CALENDAR_KEY), transaction(session):
            game = lock_active_game(session)
            if game is None:
                raise NoActiveRound()
            held.enter_context(process_locks.hold(round_key(game.id)))
            previous = self._repo.get_previous(session, game)
            if previous is None:
                return RenewalReport(target_game_id=game.id)
            return self._boards.renew_into(session, previous, game)

    def set_winning_numbers(self, session: Session, game_id: int, winning_numbers: Iterable[Any]) -> SettlementSummary:
        """Close the round with its winning numbers and settle every board in it."""

        numbers = self._rules.validate_winning_numbers(winning_numbers)

        with process_locks.hold(ROUND_CALENDAR_KEY, round_key(game_id)), transaction(session):
            game = lock_game(session, game_id)
            if game is None:
                raise RoundNotFound(game_id)
            if game.is_closed:
                raise RoundAlreadyClosed(game_id)

            game.winning_numbers = numbers
            game.closed_at = self._clock()
            game.is_active = False

            boards = self._board_repo.list_for_game(session, game_id)
            for board in boards:
                if board.is_winning is None:
                    board.is_winning = is_winning(board.numbers, numbers)

            summary = summarize(game, boards)

        logger.info(
            "Closed game %s with %s: %s/%s winning boards, revenue %s",
            game_id,
            numbers,
            summary.winning_boards,
            summary.total_boards,
            summary.digital_revenue,
        )
        return summary

    def get_settlement_summary(self, session: Session, game_id: int) -> SettlementSummary:
        """Summary of an already closed round, recomputed from stored results."""

        game = self.get_game(session, game_id)
        if not game.is_closed:
            raise RoundNotClosed(game_id)
        return summarize(game, self._board_repo.list_for_game(session, game_id))

    def get_history(self, session: Session) -> Sequence[Game]:
        """Closed rounds, newest first."""

        return self._repo.list_closed(session)

    def get_player_history(self, session: Session, player_id: int) -> list[PlayerHistoryItem]:
        if self._players.get_by_id(session, player_id) is None:
            raise PlayerNotFound(player_id)

        return [
            PlayerHistoryItem(
                game_id=game.id,
                week_number=game.week_number,
                year=game.year,
                game_closed_at=game.closed_at,
                winning_numbers=list(game.winning_numbers) if game.winning_numbers is not None else None,
                board_id=board.id,
                numbers=list(board.numbers),
                price=board.price,
                board_created_at=board.created_at,
                is_winning=board.is_winning,
            )
            for board, game in self._board_repo.list_history_for_player(session, player_id)
        ]
