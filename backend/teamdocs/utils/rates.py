from __future__ import annotations

import math


def percentage(part: int | float, whole: int | float) -> float:
    """part/whole as a percentage rounded to one decimal; 0.0 when whole is 0."""
    if not whole:
        return 0.0
    return round((part / whole) * 100, 1)


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
