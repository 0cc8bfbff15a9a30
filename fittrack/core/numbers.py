"""Numeric helpers shared by services."""

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positives (12.5 -> 13), unlike round()'s banker's rounding."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def percent(part: int, whole: int) -> int:
    """Whole-number percentage, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return int(round_half_up(100 * part / whole))
