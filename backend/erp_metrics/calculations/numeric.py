"""Rounding helpers shared by the KPI and forecast calculators."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` places with ties going towards +infinity.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``);
    dashboard figures are expected to round ``2.5`` up to ``3``. Non-finite
    values are returned unchanged.
    """

    if not math.isfinite(value):
        return value
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half-up and return an ``int``; non-finite values give ``0``."""

    if not math.isfinite(value):
        return 0
    return int(round_half_up(value))


__all__ = ["round_half_up", "round_int"]
