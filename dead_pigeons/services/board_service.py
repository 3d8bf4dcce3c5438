"""Board purchase, renewal into the next round, and board queries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from dead_pigeons.db import transaction
from dead_pigeons.errors import (
    BoardNotFound,
    BoardNotOwned,
    InsufficientBalance,
    PlayerInactive,
    PlayerNotFound,
    RoundNotFound,
    RoundNotOpen,
)
from dead_pigeons.locks import lock_game, lock_player, player_key, process_locks, round_key
from dead_pigeons.models.base import utcnow
from dead_pigeons.models.board import Board
from dead_pigeons.models.game import Game
from dead_pigeons.repositories.board_repository import BoardRepository
from dead_pigeons.repositories.player_repository import PlayerRepository
from dead_pigeons.rules import GameRules
from dead_pigeons.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


@dataclass
class RenewalReport:
    """Outcome of one renewal pass into a newly opened round."""

    target_game_id: int
    renewed: list[Board] = field(default_factory=list)
    stopped_board_ids: list[int] = field(default_factory=list)
    already_renewed_board_ids: list[int] = field(default_factory=list)


class BoardService:
    """Board use-cases.

    Rules:
    * only active players may buy, and only into the currently open round;
    * 5..8 distinct numbers from the pool, priced by count;
    * a purchase is rejected (never queued) when the balance is short;
    * ``repeat_weeks`` future rounds are bought automatically, each one
      charged and balance-checked when that round opens.
    """

    def __init__(
        self,
        rules: GameRules | None = None,
        ledger: LedgerService | None = None,
        repository: BoardRepository | None = None,
        players: PlayerRepository | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._rules = rules or GameRules()
        self._ledger = ledger or LedgerService()
        self._repo = repository or BoardRepository()
        self._players = players or PlayerRepository()
        self._clock = clock

    def create_board(
        self,
        session: Session,
        player_id: int,
        game_id: int,
        numbers: Iterable[Any],
        repeat_weeks: Any = 0,
    ) -> Board:
        """Buy one board for the open round and charge its weekly price."""

        with process_locks.hold(round_key(game_id), player_key(player_id)), transaction(session):
            # Row locks in the same order as the process locks: round, then player.
            game = lock_game(session, game_id, shared=True)
            player = lock_player(session, player_id)

            if player is None:
                raise PlayerNotFound(player_id)
            if not player.is_active:
                raise PlayerInactive(player_id)

            if game is None:
                raise RoundNotFound(game_id)
            if not game.is_active or game.is_closed:
                raise RoundNotOpen(game_id)

            selection = self._rules.validate_board_numbers(numbers)
            repeat_weeks = self._rules.validate_repeat_weeks(repeat_weeks)
            price = self._rules.price_for(len(selection))

            balance = self._ledger.balance_unchecked(session, player_id)
            if balance < price:
                raise InsufficientBalance(player_id, balance, price)

            board = self._repo.create(
                session,
                Board(
                    player_id=player_id,
                    game_id=game_id,
                    numbers=selection,
                    price=price,
                    is_winning=None,
                    repeat_weeks=repeat_weeks,
                    repeat_active=repeat_weeks > 0,
                    created_at=self._clock(),
                ),
            )

        logger.info(
            "Player %s bought board %s for game %s (%s numbers, price %s, repeat %s)",
            player_id,
            board.id,
            game_id,
            len(selection),
            price,
            repeat_weeks,
        )
        return board

    def renew_into(self, session: Session, previous_game: Game, target_game: Game) -> RenewalReport:
        """Carry repeating boards of ``previous_game`` into ``target_game``.

        Must run inside the caller's transaction while it holds the round
        calendar. Safe to re-run: a source already carried into the target
        round is skipped. A renewal the player cannot afford ends that chain
        instead of failing the pass.
        """

        report = RenewalReport(target_game_id=target_game.id)

        for source in self._repo.list_renewable(session, previous_game.id):
            if self._repo.renewal_exists(session, source.id, target_game.id):
                report.already_renewed_board_ids.append(source.id)
                continue

            with process_locks.hold(player_key(source.player_id)):
                player = lock_player(session, source.player_id)
                price = self._rules.price_for(len(source.numbers))
                balance = self._ledger.balance_unchecked(session, source.player_id)

                if player is None or not player.is_active or balance < price:
                    source.repeat_active = False
                    source.repeat_weeks = 0
                    session.flush()
                    report.stopped_board_ids.append(source.id)
                    logger.warning(
                        "Stopped repeating board %s for player %s (active=%s, balance=%s, price=%s)",
                        source.id,
                        source.player_id,
                        bool(player and player.is_active),
                        balance,
                        price,
                    )
                    continue

                remaining = source.repeat_weeks - 1
                renewed = self._repo.create(
                    session,
                    Board(
                        player_id=source.player_id,
                        game_id=target_game.id,
                        numbers=list(source.numbers),
                        price=price,
                        is_winning=None,
                        repeat_weeks=remaining,
                        repeat_active=remaining > 0,
                        renewed_from_id=source.id,
                        created_at=self._clock(),
                    ),
                )
                report.renewed.append(renewed)
                logger.info(
                    "Renewed board %s into game %s as board %s (%s weeks left)",
                    source.id,
                    target_game.id,
                    renewed.id,
                    remaining,
                )

        return report

    def stop_repeating(self, session: Session, player_id: int, board_id: int) -> Board:
        """End the repeat chain of one of the player's boards. Nothing is refunded."""

        with transaction(session):
            board = self._repo.get_by_id(session, board_id)
            if board is None:
                raise BoardNotFound(board_id)
            if board.player_id != player_id:
                raise BoardNotOwned(board_id, player_id)
            if board.repeat_active or board.repeat_weeks:
                board.repeat_active = False
                board.repeat_weeks = 0
                logger.info("Player %s stopped repeating board %s", player_id, board_id)
        return board

    def get_board(self, session: Session, board_id: int) -> Board:
        board = self._repo.get_by_id(session, board_id)
        if board is None:
            raise BoardNotFound(board_id)
        return board

    def get_boards_for_game(self, session: Session, game_id: int) -> Sequence[Board]:
        return self._repo.list_for_game(session, game_id)

    def get_boards_for_player(self, session: Session, player_id: int) -> Sequence[Board]:
        if self._players.get_by_id(session, player_id) is None:
            raise PlayerNotFound(player_id)
        return self._repo.list_for_player(session, player_id)
