"""
Scoring Helper Utilities
Numeric helpers shared by the scoring and matching algorithms
"""

import math
from typing import Iterable


def clamp(value: float, lower: float, upper: float) -> float:
    """
    Bound a value to the closed interval [lower, upper]

    Example:
        >>> clamp(55.0, 0, 40)
        40
    """
    return max(lower, min(value, upper))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounding up

    Python's built-in round() rounds halves to even, which would turn a
    score of 70.5 into 70. Scores and averages here round halves upward.

    Example:
        >>> round_half_up(70.5)
        71
        >>> round(70.5)
        70
    """
    return int(math.floor(value + 0.5))


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty iterable"""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def format_price(amount: float) -> str:
    """
    Format a nightly price for human-readable reasons

    Example:
        >>> format_price(120.0)
        '$120'
        >>> format_price(99.5)
        '$99.50'
    """
    if float(amount).is_integer():
        return f"${int(amount)}"
    return f"${amount:.2f}"
