"""Custom exceptions for centralized error handling.

Every error belongs to one of four kinds (``not_found``, ``invalid_input``,
``state_conflict``, ``policy_violation``); ``code`` narrows it further so
callers can tell e.g. ``insufficient_balance`` from ``player_inactive``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    kind: ClassVar[str] = "internal"

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Resource not found."""

    kind = "not_found"

    def __init__(self, message: str = "Not found", details: Any | None = None, code: str = "not_found") -> None:
        super().__init__(code=code, message=message, status_code=404, details=details)


class ValidationError(AppError):
    """Input validation error."""

    kind = "invalid_input"

    def __init__(
        self, message: str = "Validation error", details: Any | None = None, code: str = "validation_error"
    ) -> None:
        super().__init__(code=code, message=message, status_code=400, details=details)


class ConflictError(AppError):
    """Conflict with the current state (e.g., round already closed)."""

    kind = "state_conflict"

    def __init__(self, message: str = "Conflict", details: Any | None = None, code: str = "conflict") -> None:
        super().__init__(code=code, message=message, status_code=409, details=details)


class PolicyViolationError(AppError):
    """Request is well-formed but a business policy forbids it."""

    kind = "policy_violation"

    def __init__(
        self, message: str = "Policy violation", details: Any | None = None, code: str = "policy_violation"
    ) -> None:
        super().__init__(code=code, message=message, status_code=422, details=details)


# Not found


class RoundNotFound(NotFoundError):
    def __init__(self, game_id: int) -> None:
        super().__init__(f"Game {game_id} not found", {"game_id": game_id}, code="round_not_found")


class NoActiveRound(NotFoundError):
    def __init__(self) -> None:
        super().__init__("No active game found", code="no_active_round")


class PlayerNotFound(NotFoundError):
    def __init__(self, player_id: int) -> None:
        super().__init__(f"Player {player_id} not found", {"player_id": player_id}, code="player_not_found")


class TransactionNotFound(NotFoundError):
    def __init__(self, transaction_id: int) -> None:
        super().__init__(
            f"Transaction {transaction_id} not found",
            {"transaction_id": transaction_id},
            code="transaction_not_found",
        )


class BoardNotFound(NotFoundError):
    def __init__(self, board_id: int) -> None:
        super().__init__(f"Board {board_id} not found", {"board_id": board_id}, code="board_not_found")


# Invalid input


class InvalidWinningNumbers(ValidationError):
    def __init__(self, message: str, numbers: Any | None = None) -> None:
        super().__init__(message, {"winning_numbers": numbers}, code="invalid_winning_numbers")


class InvalidNumberSelection(ValidationError):
    def __init__(self, message: str, numbers: Any | None = None) -> None:
        super().__init__(message, {"numbers": numbers}, code="invalid_number_selection")


class InvalidAmount(ValidationError):
    def __init__(self, amount: Any) -> None:
        super().__init__("Amount must be a positive integer", {"amount": amount}, code="invalid_amount")


class InvalidRepeatWeeks(ValidationError):
    def __init__(self, repeat_weeks: Any, maximum: int) -> None:
        super().__init__(
            f"Repeat weeks must be between 0 and {maximum}",
            {"repeat_weeks": repeat_weeks},
            code="invalid_repeat_weeks",
        )


class InvalidMobilePayNumber(ValidationError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            "MobilePay number must be at least 3 characters",
            {"mobile_pay_number": value},
            code="invalid_mobile_pay_number",
        )


# State conflicts


class RoundAlreadyActive(ConflictError):
    def __init__(self, game_id: int) -> None:
        super().__init__(
            f"Game {game_id} is still active; close it before opening the next round",
            {"game_id": game_id},
            code="round_already_active",
        )


class RoundAlreadyClosed(ConflictError):
    def __init__(self, game_id: int) -> None:
        super().__init__(
            f"Winning numbers already set for game {game_id}", {"game_id": game_id}, code="round_already_closed"
        )


class RoundNotClosed(ConflictError):
    def __init__(self, game_id: int) -> None:
        super().__init__(f"Game {game_id} has not been closed yet", {"game_id": game_id}, code="round_not_closed")


class RoundNotOpen(ConflictError):
    def __init__(self, game_id: int) -> None:
        super().__init__(
            f"Game {game_id} is not the open round; boards can only be bought for the active game",
            {"game_id": game_id},
            code="round_not_open",
        )


class TransactionNotPending(ConflictError):
    def __init__(self, transaction_id: int, status: str) -> None:
        super().__init__(
            f"Only pending transactions can be settled (transaction {transaction_id} is {status})",
            {"transaction_id": transaction_id, "status": status},
            code="transaction_not_pending",
        )


class DuplicateMobilePayNumber(ConflictError):
    def __init__(self, mobile_pay_number: str) -> None:
        super().__init__(
            "A transaction with this MobilePay number already exists",
            {"mobile_pay_number": mobile_pay_number},
            code="duplicate_mobile_pay_number",
        )


class EmailAlreadyRegistered(ConflictError):
    def __init__(self, email: str) -> None:
        super().__init__("Player with this email already exists", {"email": email}, code="email_already_registered")


# Policy violations


class InsufficientBalance(PolicyViolationError):
    def __init__(self, player_id: int, balance: int, price: int) -> None:
        super().__init__(
            "Not enough balance to buy this board for this game",
            {"player_id": player_id, "balance": balance, "price": price},
            code="insufficient_balance",
        )


class PlayerInactive(PolicyViolationError):
    def __init__(self, player_id: int) -> None:
        super().__init__(
            f"Player {player_id} is not active", {"player_id": player_id}, code="player_inactive"
        )


class BoardNotOwned(PolicyViolationError):
    def __init__(self, board_id: int, player_id: int) -> None:
        super().__init__(
            "You can only stop repeating for your own boards",
            {"board_id": board_id, "player_id": player_id},
            code="board_not_owned",
        )
