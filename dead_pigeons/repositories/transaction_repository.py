"""Repository layer for deposit transactions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from dead_pigeons.models.transaction import Transaction, TransactionStatus


class TransactionRepository:
    """CRUD operations for Transaction."""

    def get_by_id(self, session: Session, transaction_id: int, *, refresh: bool = False) -> Transaction | None:
        """``refresh`` reloads an instance already in the session (after a bulk UPDATE)."""

        return session.get(Transaction, transaction_id, populate_existing=refresh)

    def mobile_pay_number_exists(self, session: Session, mobile_pay_number: str) -> bool:
        stmt = select(Transaction.id).where(Transaction.mobile_pay_number == mobile_pay_number)
        return session.scalars(stmt.limit(1)).first() is not None

    def list_for_player(self, session: Session, player_id: int) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.player_id == player_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        return list(session.scalars(stmt).all())

    def list_pending(self, session: Session) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.status == TransactionStatus.PENDING)
            .order_by(Transaction.created_at.asc(), Transaction.id.asc())
        )
        return list(session.scalars(stmt).all())

    def total_approved(self, session: Session, player_id: int) -> int:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.player_id == player_id,
            Transaction.status == TransactionStatus.APPROVED,
        )
        return int(session.scalar(stmt) or 0)

    def create(self, session: Session, transaction: Transaction) -> Transaction:
        session.add(transaction)
        session.flush()
        return transaction

    def settle_if_pending(
        self,
        session: Session,
        transaction_id: int,
        status: TransactionStatus,
        *,
        approved_at: datetime | None = None,
        rejection_reason: str | None = None,
    ) -> bool:
        """Compare-and-set Pending -> ``status``.

        Returns False when the row is missing or no longer Pending; exactly
        one of two racing callers can get True.
        """

        stmt = (
            update(Transaction)
            .where(Transaction.id == transaction_id, Transaction.status == TransactionStatus.PENDING)
            .values(status=status, approved_at=approved_at, rejection_reason=rejection_reason)
            .execution_options(synchronize_session="fetch")
        )
        result = session.execute(stmt)
        return result.rowcount == 1
