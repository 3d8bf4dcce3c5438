"""Deposit workflow: Pending -> Approved | Rejected."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from dead_pigeons.db import transaction
from dead_pigeons.errors import (
    DuplicateMobilePayNumber,
    InvalidAmount,
    InvalidMobilePayNumber,
    PlayerInactive,
    PlayerNotFound,
    TransactionNotFound,
    TransactionNotPending,
)
from dead_pigeons.models.base import utcnow
from dead_pigeons.models.transaction import Transaction, TransactionStatus
from dead_pigeons.repositories.player_repository import PlayerRepository
from dead_pigeons.repositories.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)


class TransactionService:
    """Create deposit requests and settle them.

    Approval is the only operation that increases a player's balance.
    """

    def __init__(
        self,
        repository: TransactionRepository | None = None,
        players: PlayerRepository | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository or TransactionRepository()
        self._players = players or PlayerRepository()
        self._clock = clock

    def create_transaction(
        self, session: Session, player_id: int, mobile_pay_number: str, amount: Any
    ) -> Transaction:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(amount)

        mobile_pay_number = str(mobile_pay_number or "").strip()
        if len(mobile_pay_number) < 3:
            raise InvalidMobilePayNumber(mobile_pay_number)

        with transaction(session):
            player = self._players.get_by_id(session, player_id)
            if player is None:
                raise PlayerNotFound(player_id)
            if not player.is_active:
                raise PlayerInactive(player_id)

            if self._repo.mobile_pay_number_exists(session, mobile_pay_number):
                raise DuplicateMobilePayNumber(mobile_pay_number)

            created = self._repo.create(
                session,
                Transaction(
                    player_id=player_id,
                    mobile_pay_number=mobile_pay_number,
                    amount=amount,
                    status=TransactionStatus.PENDING,
                    created_at=self._clock(),
                ),
            )

        logger.info("Deposit %s of %s registered for player %s", created.id, amount, player_id)
        return created

    def approve(self, session: Session, transaction_id: int) -> Transaction:
        approved = self._settle(
            session, transaction_id, TransactionStatus.APPROVED, approved_at=self._clock()
        )
        logger.info("Deposit %s approved (+%s for player %s)", approved.id, approved.amount, approved.player_id)
        return approved

    def reject(self, session: Session, transaction_id: int, reason: str | None = None) -> Transaction:
        rejected = self._settle(
            session, transaction_id, TransactionStatus.REJECTED, rejection_reason=(reason or None)
        )
        logger.info("Deposit %s rejected", rejected.id)
        return rejected

    def _settle(
        self,
        session: Session,
        transaction_id: int,
        target: TransactionStatus,
        *,
        approved_at: datetime | None = None,
        rejection_reason: str | None = None,
    ) -> Transaction:
        if not TransactionStatus.PENDING.can_become(target):
            raise ValueError(f"Pending transactions cannot become {target.value}")

        with transaction(session):
            swapped = self._repo.settle_if_pending(
                session,
                transaction_id,
                target,
                approved_at=approved_at,
                rejection_reason=rejection_reason,
            )
            # The UPDATE bypasses the identity map; reload so approved_at and the reason show up.
            current = self._repo.get_by_id(session, transaction_id, refresh=True)
            if current is None:
                raise TransactionNotFound(transaction_id)
            if not swapped:
                raise TransactionNotPending(transaction_id, current.status.value)

        return current

    def get_transaction(self, session: Session, transaction_id: int) -> Transaction:
        found = self._repo.get_by_id(session, transaction_id)
        if found is None:
            raise TransactionNotFound(transaction_id)
        return found

    def list_for_player(self, session: Session, player_id: int) -> Sequence[Transaction]:
        if self._players.get_by_id(session, player_id) is None:
            raise PlayerNotFound(player_id)
        return self._repo.list_for_player(session, player_id)

    def list_pending(self, session: Session) -> Sequence[Transaction]:
        return self._repo.list_pending(session)
