"""
Utilities Module
Helper functions for the deal pipeline
"""

from .helpers import clamp, round_half_up, mean, format_price

__all__ = [
    "clamp",
    "round_half_up",
    "mean",
    "format_price"
]
