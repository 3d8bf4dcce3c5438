"""Shared fixtures for the service tests: a fresh in-memory database per test."""

from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from dead_pigeons.db import create_app_engine, create_session_factory
from dead_pigeons.models import Player, Transaction
from dead_pigeons.models.base import Base
from dead_pigeons.rules import GameRules
from dead_pigeons.services import build_services


class TickingClock:
    """Deterministic clock: every read is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


class ServiceTestCase(unittest.TestCase):
    """Wires every service against its own in-memory SQLite database."""

    rules = GameRules(pool_max=20)

    def database_url(self) -> str:
        return "sqlite://"

    def setUp(self):
        self.engine = create_app_engine(self.database_url())
        Base.metadata.create_all(bind=self.engine)
        self.session_factory = create_session_factory(self.engine)
        self.session = self.session_factory()
        self.clock = TickingClock()
        self.services = build_services(self.rules, clock=self.clock)

    def tearDown(self):
        self.session.close()
        self.engine.dispose()

    # Builders

    def make_player(self, name: str = "Ada Lovelace", *, active: bool = True, email: str | None = None) -> Player:
        email = email or f"{name.lower().replace(' ', '.')}@club.example"
        player = self.services.players.create_player(self.session, name, email, "+45 1234 5678")
        if active:
            player = self.services.players.activate_player(self.session, player.id)
        return player

    def deposit(self, player: Player, amount: int, *, approve: bool = True) -> Transaction:
        self._deposits = getattr(self, "_deposits", 0) + 1
        created = self.services.transactions.create_transaction(
            self.session, player.id, f"MP-{self._deposits:05d}", amount
        )
        if approve:
            return self.services.transactions.approve(self.session, created.id)
        return created

    def bootstrap_round(self, week: int = 10, year: int = 2026):
        return self.services.games.open_next_round(self.session, week_number=week, year=year).game

    def open_next(self):
        return self.services.games.open_next_round(self.session)

    def close(self, game, numbers=(1, 2, 3)):
        return self.services.games.set_winning_numbers(self.session, game.id, list(numbers))

    def balance(self, player: Player) -> int:
        return self.services.ledger.get_balance(self.session, player.id)
