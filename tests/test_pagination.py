"""Offset and cursor pagination strategies."""

from __future__ import annotations

import pytest

from books_api.config import PaginationConfig
from books_api.models.book import Book
from books_api.services.pagination import (
    cursor_page,
    offset_page,
    resolve_cursor,
    resolve_limit,
    resolve_offset,
)

CONFIG = PaginationConfig(default_limit=10, max_limit=50)


async def _insert_books(session, n: int) -> None:
    session.add_all(
        Book(
            isbn13=9780000000000 + i,
            authors=f"Author {i}",
            publication_year=1900 + i,
            original_title=f"Original {i}",
            title=f"Title {i}",
            rating_1_star=i,
        )
        for i in range(1, n + 1)
    )
    await session.commit()


class TestResolveInputs:
    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 10), ("", 10), ("abc", 10), ("0", 10), ("-4", 10), ("5", 5), (7, 7), ("500", 50), ("2.5", 10)],
    )
    def test_limit(self, raw, expected):
        assert resolve_limit(raw, CONFIG) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 0), ("x", 0), ("-1", 0), ("0", 0), ("15", 15)],
    )
    def test_offset_and_cursor(self, raw, expected):
        assert resolve_offset(raw) == expected
        assert resolve_cursor(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [("99999999999999999999", 0), (str(2**63), 0), (str(2**63 - 1), 2**63 - 1)],
    )
    def test_offset_beyond_bigint(self, raw, expected):
        assert resolve_offset(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [("99999999999999999999", 0), (str(2**31), 0), (str(2**31 - 1), 2**31 - 1)],
    )
    def test_cursor_beyond_id_column(self, raw, expected):
        assert resolve_cursor(raw) == expected


class TestOffsetPage:
    @pytest.mark.asyncio
    async def test_first_window(self, db_session):
        await _insert_books(db_session, 12)

        page = await offset_page(db_session, CONFIG, limit="5", offset="0")

        assert [b.id for b in page.entries] == [1, 2, 3, 4, 5]
        assert page.pagination.totalRecords == 12
        assert page.pagination.nextPage == 5

    @pytest.mark.asyncio
    async def test_invalid_inputs_use_defaults(self, db_session):
        await _insert_books(db_session, 12)

        page = await offset_page(db_session, CONFIG, limit="lots", offset="-3")

        assert len(page.entries) == 10
        assert page.pagination.limit == 10
        assert page.pagination.offset == 0
        assert page.pagination.nextPage == 10

    @pytest.mark.asyncio
    async def test_past_the_end(self, db_session):
        await _insert_books(db_session, 3)

        page = await offset_page(db_session, CONFIG, limit="5", offset="10")

        assert page.entries == []
        assert page.pagination.totalRecords == 3
        assert page.pagination.nextPage == 15


class TestCursorPage:
    @pytest.mark.asyncio
    async def test_successive_windows_are_disjoint(self, db_session):
        await _insert_books(db_session, 12)

        first = await cursor_page(db_session, CONFIG, limit="5", cursor="0")
        second = await cursor_page(
            db_session, CONFIG, limit="5", cursor=str(first.pagination.cursor)
        )

        first_ids = [b.id for b in first.entries]
        second_ids = [b.id for b in second.entries]
        assert first_ids == [1, 2, 3, 4, 5]
        assert second_ids == [6, 7, 8, 9, 10]
        assert first.pagination.cursor == 5
        assert second.pagination.cursor == 10
        assert second.pagination.totalRecords == 12

    @pytest.mark.asyncio
    async def test_empty_window_echoes_cursor(self, db_session):
        await _insert_books(db_session, 3)

        page = await cursor_page(db_session, CONFIG, limit="5", cursor="40")

        assert page.entries == []
        assert page.pagination.cursor == 40

    @pytest.mark.asyncio
    async def test_entries_carry_derived_ratings(self, db_session):
        await _insert_books(db_session, 2)

        page = await cursor_page(db_session, CONFIG)

        assert page.entries[1].ratings.count == 2
        assert page.entries[1].ratings.average == 1.0
