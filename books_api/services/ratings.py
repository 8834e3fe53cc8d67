"""
Rating statistics derived from the five star buckets, and the bucket
mutation rules.

Average and count are never stored: every read path (Python mapping and the
SQL filter expression) derives them from ``rating_1_star..rating_5_star``.
An average over zero ratings is ``None``.
"""

from __future__ import annotations

import enum
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from sqlalchemy import Float, case, cast
from sqlalchemy.sql.elements import ColumnElement

from books_api.models.book import STAR_COLUMNS, Book

STARS = (1, 2, 3, 4, 5)


class RatingAction(str, enum.Enum):
    SET = "set"
    INCREMENT = "increment"
    DECREMENT = "decrement"


def total(counts: Sequence[int]) -> int:
    """Total number of ratings across the five buckets."""
    _check_counts(counts)
    return sum(counts)


def weighted_average(counts: Sequence[int]) -> Optional[float]:
    """Count-weighted mean star rating, or None when there are no ratings."""
    count = total(counts)
    if count == 0:
        return None
    weighted = sum(star * n for star, n in zip(STARS, counts))
    return weighted / count


def round_rating(value: Optional[float], places: int = 1) -> Optional[float]:
    """Round half away from zero. ``None`` passes through."""
    if value is None:
        return None
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def display_average(counts: Sequence[int]) -> Optional[float]:
    return round_rating(weighted_average(counts))


def _check_counts(counts: Sequence[int]) -> None:
    if len(counts) != len(STARS):
        raise ValueError(f"expected {len(STARS)} star buckets, got {len(counts)}")
    if any(n < 0 for n in counts):
        raise ValueError("star bucket counts must be non-negative")


# ── SQL-side equivalents ──


def star_column(star: int):
    if star not in STARS:
        raise ValueError(f"star must be between 1 and 5, got {star}")
    return getattr(Book, STAR_COLUMNS[star - 1])


def total_expression() -> ColumnElement:
    return (
        Book.rating_1_star
        + Book.rating_2_star
        + Book.rating_3_star
        + Book.rating_4_star
        + Book.rating_5_star
    )


def average_expression() -> ColumnElement:
    """Weighted average as a SQL expression; NULL when all buckets are zero."""
    weighted = (
        Book.rating_1_star * 1
        + Book.rating_2_star * 2
        + Book.rating_3_star * 3
        + Book.rating_4_star * 4
        + Book.rating_5_star * 5
    )
    count = total_expression()
    return case(
        (count == 0, None),
        else_=cast(weighted, Float) / cast(count, Float),
    )


def bucket_update(star: int, amount: int, action: RatingAction) -> dict:
    """Column assignment for a single ``UPDATE`` statement applying ``action``."""
    if amount < 0:
        raise ValueError("amount must be non-negative")
    action = RatingAction(action)
    column = star_column(star)
    if action is RatingAction.SET:
        value = amount
    elif action is RatingAction.INCREMENT:
        value = column + amount
    else:
        value = case((column - amount < 0, 0), else_=column - amount)
    return {column.key: value}
