"""Win determination for a settled round."""

from __future__ import annotations

from collections.abc import Iterable


def is_winning(board_numbers: Iterable[int], winning_numbers: Iterable[int]) -> bool:
    """A board wins iff every winning number is among the board's numbers.

    There are no partial-match tiers: two out of three is a loss.
    """

    return set(winning_numbers).issubset(board_numbers)
