"""Persisted book rows → public book representation."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from books_api.models.book import STAR_COLUMNS
from books_api.schemas.book import BookResponse, Icons, Ratings
from books_api.services.ratings import display_average, total


def to_book(row: Mapping[str, Any]) -> BookResponse:
    counts = [row[column] or 0 for column in STAR_COLUMNS]
    return BookResponse(
        id=row["id"],
        isbn13=row["isbn13"],
        authors=row["authors"],
        publication=row["publication_year"],
        original_title=row["original_title"],
        title=row["title"],
        ratings=Ratings(
            average=display_average(counts),
            count=total(counts),
            rating_1=counts[0],
            rating_2=counts[1],
            rating_3=counts[2],
            rating_4=counts[3],
            rating_5=counts[4],
        ),
        icons=Icons(large=row["image_url"], small=row["image_small_url"]),
    )


def to_books(rows: Iterable[Mapping[str, Any]]) -> list[BookResponse]:
    return [to_book(row) for row in rows]
