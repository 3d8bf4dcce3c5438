"""Game rules that are independent from HTTP and DB.

Rule of thumb:
- OK: pricing, number validation, round calendar arithmetic.
- Not OK: touching DB sessions, Flask, datetime.now().
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from dead_pigeons.errors import InvalidNumberSelection, InvalidRepeatWeeks, InvalidWinningNumbers

WINNING_NUMBER_COUNT = 3
MIN_BOARD_NUMBERS = 5
MAX_BOARD_NUMBERS = 8

# Weekly price per board, keyed by how many numbers were picked.
DEFAULT_PRICE_TABLE: Mapping[int, int] = MappingProxyType({5: 20, 6: 40, 7: 80, 8: 160})


@dataclass(frozen=True)
class GameRules:
    """Numeric rules of the weekly game."""

    pool_max: int = 16
    max_repeat_weeks: int = 52
    weeks_per_year: int = 52
    price_table: Mapping[int, int] = field(default_factory=lambda: DEFAULT_PRICE_TABLE)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "GameRules":
        return cls(
            pool_max=int(config.get("NUMBER_POOL_MAX", 16)),
            max_repeat_weeks=int(config.get("MAX_REPEAT_WEEKS", 52)),
            weeks_per_year=int(config.get("WEEKS_PER_YEAR", 52)),
        )

    def in_pool(self, number: int) -> bool:
        return 1 <= number <= self.pool_max

    def price_for(self, count: int) -> int:
        """Return the weekly price for a board with ``count`` numbers."""

        try:
            return self.price_table[count]
        except KeyError:
            raise InvalidNumberSelection(
                f"Board must have between {MIN_BOARD_NUMBERS} and {MAX_BOARD_NUMBERS} numbers"
            ) from None

    def validate_board_numbers(self, numbers: Iterable[Any]) -> list[int]:
        """Validate a board selection and return it sorted ascending."""

        raw = list(numbers)
        if not all(isinstance(n, int) and not isinstance(n, bool) for n in raw):
            raise InvalidNumberSelection("Board numbers must be integers", raw)
        if not MIN_BOARD_NUMBERS <= len(raw) <= MAX_BOARD_NUMBERS:
            raise InvalidNumberSelection(
                f"Board must have between {MIN_BOARD_NUMBERS} and {MAX_BOARD_NUMBERS} numbers", raw
            )
        if len(set(raw)) != len(raw):
            raise InvalidNumberSelection("Board numbers must be distinct", raw)
        if not all(self.in_pool(n) for n in raw):
            raise InvalidNumberSelection(f"Board numbers must be between 1 and {self.pool_max}", raw)
        return sorted(raw)

    def validate_winning_numbers(self, numbers: Iterable[Any]) -> list[int]:
        """Validate the three winning numbers and return them sorted ascending."""

        raw = list(numbers)
        if not all(isinstance(n, int) and not isinstance(n, bool) for n in raw):
            raise InvalidWinningNumbers("Winning numbers must be integers", raw)
        if len(raw) != WINNING_NUMBER_COUNT or len(set(raw)) != WINNING_NUMBER_COUNT:
            raise InvalidWinningNumbers(f"Winning numbers must be {WINNING_NUMBER_COUNT} distinct values", raw)
        if not all(self.in_pool(n) for n in raw):
            raise InvalidWinningNumbers(f"Winning numbers must be between 1 and {self.pool_max}", raw)
        return sorted(raw)

    def validate_repeat_weeks(self, repeat_weeks: Any) -> int:
        if isinstance(repeat_weeks, bool) or not isinstance(repeat_weeks, int):
            raise InvalidRepeatWeeks(repeat_weeks, self.max_repeat_weeks)
        if not 0 <= repeat_weeks <= self.max_repeat_weeks:
            raise InvalidRepeatWeeks(repeat_weeks, self.max_repeat_weeks)
        return repeat_weeks

    def next_week(self, week_number: int, year: int) -> tuple[int, int]:
        """Return the ``(week_number, year)`` of the round after the given one."""

        if week_number < self.weeks_per_year:
            return week_number + 1, year
        return 1, year + 1

    def week_of(self, moment: datetime) -> tuple[int, int]:
        """Simple week number: whole weeks since 1 January, capped at the last week."""

        days = (moment.date() - moment.date().replace(month=1, day=1)).days
        return min(days // 7 + 1, self.weeks_per_year), moment.year
