"""
Dynamic filter construction for book queries.

Each validated filter becomes one comparison, dispatched on its ``FilterKind``:

* ``EXACT``         column = :pN
* ``PARTIAL_TEXT``  column ILIKE :pN ESCAPE '\\'   (the bound value is ``%value%``
                    with ``%``, ``_`` and ``\\`` in the value escaped)
* ``MIN_AVERAGE``   <weighted average expression> >= :pN

Comparisons are AND-ed in the mapping's iteration order and every value is a
bind parameter named ``p1..pN`` in that same order, so user input never
becomes query text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy import Select, and_, bindparam, select
from sqlalchemy.sql.elements import ColumnElement

from books_api.models.book import Book
from books_api.services.ratings import average_expression
from books_api.services.validation import FilterKind, FilterValidationError, filter_kind

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class BuiltFilter:
    comparisons: tuple[ColumnElement[bool], ...]
    args: list[Any] = field(default_factory=list)

    @property
    def clause(self) -> ColumnElement[bool]:
        return and_(*self.comparisons)


def escape_like(value: str) -> str:
    """Make LIKE wildcards in ``value`` match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _comparison(param: str, kind: FilterKind, value: Any, position: int) -> tuple[ColumnElement[bool], Any]:
    name = f"p{position}"
    if kind is FilterKind.PARTIAL_TEXT:
        bound = f"%{escape_like(str(value))}%"
        return getattr(Book, param).ilike(bindparam(name, bound), escape=LIKE_ESCAPE), bound
    if kind is FilterKind.MIN_AVERAGE:
        return average_expression() >= bindparam(name, value), value
    return getattr(Book, param) == bindparam(name, value), value


def build_filter(filters: Mapping[str, Any]) -> BuiltFilter:
    """
    Turn validated ``field → value`` pairs into a parameterized clause.

    Raises:
        FilterValidationError: if ``filters`` is empty or names an
            unfilterable field
    """
    if not filters:
        raise FilterValidationError("No query parameters supplied - please refer to documentation")

    comparisons = []
    args = []
    for position, (param, value) in enumerate(filters.items(), start=1):
        comparison, bound = _comparison(param, filter_kind(param), value, position)
        comparisons.append(comparison)
        args.append(bound)

    return BuiltFilter(comparisons=tuple(comparisons), args=args)


def books_query(filters: Optional[Mapping[str, Any]] = None) -> Select:
    """``SELECT`` over books ordered by id, filtered when ``filters`` is non-empty."""
    query = select(Book)
    if filters:
        query = query.where(build_filter(filters).clause)
    return query.order_by(Book.id)
