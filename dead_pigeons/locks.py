"""Concurrency control for rounds and player balances.

Two layers work together:

* Row locks (``SELECT ... FOR UPDATE`` / ``FOR SHARE``) held until the
  surrounding database transaction commits. These serialize writers across
  processes on engines that support them (PostgreSQL).
* An in-process keyed lock registry. SQLite silently ignores ``FOR UPDATE``,
  so the same critical sections are also guarded per key inside the process.

Lock order is always calendar, then round, then player. Opening a round
holds the new round's key until its renewal pass is committed.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from sqlalchemy import select
from sqlalchemy.orm import Session

from dead_pigeons.models.game import Game
from dead_pigeons.models.player import Player


def round_key(game_id: int) -> str:
    return f"round:{game_id}"


def player_key(player_id: int) -> str:
    return f"player:{player_id}"


ROUND_CALENDAR_KEY = "round:calendar"


class KeyedLocks:
    """Registry of re-entrant locks, one per key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """Hold the locks for ``keys`` in the order given."""

        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._lock_for(key))
            yield


def lock_game(session: Session, game_id: int, *, shared: bool = False) -> Game | None:
    """Lock one Game row until the transaction ends.

    ``shared`` takes ``FOR SHARE`` so concurrent purchases into the same
    round do not block each other but do block a close or renewal pass.
    """

    stmt = select(Game).where(Game.id == game_id).with_for_update(read=shared)
    return session.scalars(stmt).first()


def lock_active_game(session: Session) -> Game | None:
    stmt = select(Game).where(Game.is_active.is_(True)).with_for_update()
    return session.scalars(stmt).first()


def lock_player(session: Session, player_id: int) -> Player | None:
    """Lock one Player row; used around the read-balance/write-board pair."""

    stmt = select(Player).where(Player.id == player_id, Player.deleted_at.is_(None)).with_for_update()
    return session.scalars(stmt).first()


# Shared by every service in the process.
process_locks = KeyedLocks()
