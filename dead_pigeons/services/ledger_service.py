"""Balance ledger: approved deposits minus board spend.

Nothing here is stored. The balance is recomputed from the committed (or
flushed) rows on every read so it can never drift from them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from dead_pigeons.errors import PlayerNotFound
from dead_pigeons.repositories.board_repository import BoardRepository
from dead_pigeons.repositories.player_repository import PlayerRepository
from dead_pigeons.repositories.transaction_repository import TransactionRepository


def compute_balance(approved_amounts: Iterable[int], board_prices: Iterable[int]) -> int:
    """Pure ledger arithmetic; order of either input does not matter."""

    return sum(approved_amounts) - sum(board_prices)


@dataclass(frozen=True)
class BalanceStatement:
    player_id: int
    deposited: int
    spent: int

    @property
    def balance(self) -> int:
        return compute_balance((self.deposited,), (self.spent,))


class LedgerService:
    """Balance queries for a player."""

    def __init__(
        self,
        transactions: TransactionRepository | None = None,
        boards: BoardRepository | None = None,
        players: PlayerRepository | None = None,
    ) -> None:
        self._transactions = transactions or TransactionRepository()
        self._boards = boards or BoardRepository()
        self._players = players or PlayerRepository()

    def get_statement(self, session: Session, player_id: int) -> BalanceStatement:
        if self._players.get_by_id(session, player_id) is None:
            raise PlayerNotFound(player_id)
        return self._statement(session, player_id)

    def get_balance(self, session: Session, player_id: int) -> int:
        return self.get_statement(session, player_id).balance

    def balance_unchecked(self, session: Session, player_id: int) -> int:
        """Balance without the player lookup, for callers that already hold the player row."""

        return self._statement(session, player_id).balance

    def _statement(self, session: Session, player_id: int) -> BalanceStatement:
        return BalanceStatement(
            player_id=player_id,
            deposited=self._transactions.total_approved(session, player_id),
            spent=self._boards.total_spent(session, player_id),
        )
