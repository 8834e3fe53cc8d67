"""
Offset and cursor pagination over the books table.

Both strategies order by ascending id. The window and ``totalRecords`` are
two separate statements with no shared snapshot, so the count may disagree
with the window under concurrent writes.

Client-supplied ``limit``/``offset``/``cursor`` values that are missing,
malformed or outside the range of their database type fall back to their
defaults instead of failing the request; ``limit`` is capped at
``PaginationConfig.max_limit``.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.config import PaginationConfig
from books_api.models.book import Book
from books_api.schemas.book import (
    CursorPageResponse,
    CursorPagination,
    OffsetPageResponse,
    OffsetPagination,
)
from books_api.services.mapper import to_books
from books_api.services.validation import BIGINT_MAX, INTEGER_MAX


def _as_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def resolve_limit(raw: Any, config: PaginationConfig) -> int:
    limit = _as_int(raw)
    if limit is None or limit <= 0:
        return config.default_limit
    return min(limit, config.max_limit)


def resolve_offset(raw: Any) -> int:
    offset = _as_int(raw)
    if offset is None or not 0 <= offset <= BIGINT_MAX:
        return 0
    return offset


def resolve_cursor(raw: Any) -> int:
    """Last id seen by the client; 0 (the default) starts from the beginning."""
    cursor = _as_int(raw)
    if cursor is None or not 0 <= cursor <= INTEGER_MAX:
        return 0
    return cursor


async def count_books(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Book))).scalar() or 0


async def offset_page(
    db: AsyncSession,
    config: PaginationConfig,
    limit: Any = None,
    offset: Any = None,
) -> OffsetPageResponse:
    limit = resolve_limit(limit, config)
    offset = resolve_offset(offset)

    result = await db.execute(select(Book).order_by(Book.id).limit(limit).offset(offset))
    books = result.scalars().all()
    total = await count_books(db)

    return OffsetPageResponse(
        entries=to_books(b.as_row() for b in books),
        pagination=OffsetPagination(
            totalRecords=total,
            limit=limit,
            offset=offset,
            nextPage=limit + offset,
        ),
    )


async def cursor_page(
    db: AsyncSession,
    config: PaginationConfig,
    limit: Any = None,
    cursor: Any = None,
) -> CursorPageResponse:
    limit = resolve_limit(limit, config)
    cursor = resolve_cursor(cursor)

    result = await db.execute(
        select(Book).where(Book.id > cursor).order_by(Book.id).limit(limit)
    )
    books = result.scalars().all()
    total = await count_books(db)

    # Past the end of the table the input cursor is echoed back unchanged
    next_cursor = max((b.id for b in books), default=cursor)

    return CursorPageResponse(
        entries=to_books(b.as_row() for b in books),
        pagination=CursorPagination(
            totalRecords=total,
            limit=limit,
            cursor=next_cursor,
        ),
    )
