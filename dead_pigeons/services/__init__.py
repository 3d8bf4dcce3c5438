"""Service layer.

One service per use-case area; services take the SQLAlchemy session as the
first argument of every operation and never touch Flask themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from dead_pigeons.models.base import utcnow
from dead_pigeons.rules import GameRules
from dead_pigeons.services.board_service import BoardService
from dead_pigeons.services.game_service import GameService
from dead_pigeons.services.ledger_service import LedgerService
from dead_pigeons.services.player_service import PlayerService
from dead_pigeons.services.transaction_service import TransactionService


@dataclass(frozen=True)
class Services:
    rules: GameRules
    ledger: LedgerService
    players: PlayerService
    transactions: TransactionService
    boards: BoardService
    games: GameService


def build_services(rules: GameRules | None = None, clock: Callable[[], datetime] = utcnow) -> Services:
    rules = rules or GameRules()
    ledger = LedgerService()
    boards = BoardService(rules=rules, ledger=ledger, clock=clock)
    return Services(
        rules=rules,
        ledger=ledger,
        players=PlayerService(clock=clock),
        transactions=TransactionService(clock=clock),
        boards=boards,
        games=GameService(rules=rules, boards=boards, clock=clock),
    )


def get_services() -> Services:
    """Services wired for the current Flask app."""

    return current_app.extensions["services"]
