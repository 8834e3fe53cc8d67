"""
Seed script — populates the books table with a small sample catalogue.
Run: python -m books_api.seed
"""

from __future__ import annotations

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.database import Base, async_session, engine
from books_api.models import user  # noqa: F401
from books_api.models.book import Book

SAMPLE_BOOKS = [
    {
        "isbn13": 9780439023480,
        "authors": "Suzanne Collins",
        "publication_year": 2008,
        "original_title": "The Hunger Games",
        "title": "The Hunger Games (The Hunger Games, #1)",
        "ratings": (66715, 127936, 560092, 1481305, 2706317),
        "image_url": "https://images.gr-assets.com/books/1447303603m/2767052.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1447303603s/2767052.jpg",
    },
    {
        "isbn13": 9780439554930,
        "authors": "J.K. Rowling, Mary GrandPré",
        "publication_year": 1997,
        "original_title": "Harry Potter and the Philosopher's Stone",
        "title": "Harry Potter and the Sorcerer's Stone (Harry Potter, #1)",
        "ratings": (75504, 101676, 455024, 1156318, 3011543),
        "image_url": "https://images.gr-assets.com/books/1474154022m/3.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1474154022s/3.jpg",
    },
    {
        "isbn13": 9780316015840,
        "authors": "Stephenie Meyer",
        "publication_year": 2005,
        "original_title": "Twilight",
        "title": "Twilight (Twilight, #1)",
        "ratings": (456191, 436802, 793319, 875073, 1355439),
        "image_url": "https://images.gr-assets.com/books/1361039443m/41865.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1361039443s/41865.jpg",
    },
    {
        "isbn13": 9780061120080,
        "authors": "Harper Lee",
        "publication_year": 1960,
        "original_title": "To Kill a Mockingbird",
        "title": "To Kill a Mockingbird",
        "ratings": (60427, 117415, 446835, 1001952, 1714267),
        "image_url": "https://images.gr-assets.com/books/1361975680m/2657.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1361975680s/2657.jpg",
    },
    {
        "isbn13": 9780743273560,
        "authors": "F. Scott Fitzgerald",
        "publication_year": 1925,
        "original_title": "The Great Gatsby",
        "title": "The Great Gatsby",
        "ratings": (86236, 197621, 606158, 936012, 947718),
        "image_url": "https://images.gr-assets.com/books/1490528560m/4671.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1490528560s/4671.jpg",
    },
    {
        "isbn13": 9780525478810,
        "authors": "John Green",
        "publication_year": 2012,
        "original_title": "The Fault in Our Stars",
        "title": "The Fault in Our Stars",
        "ratings": (47994, 92723, 327550, 698471, 1543261),
        "image_url": "https://images.gr-assets.com/books/1360206420m/11870085.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1360206420s/11870085.jpg",
    },
    {
        "isbn13": 9780618260300,
        "authors": "J.R.R. Tolkien",
        "publication_year": 1937,
        "original_title": "The Hobbit or There and Back Again",
        "title": "The Hobbit",
        "ratings": (46023, 76784, 288649, 665635, 1129403),
        "image_url": "https://images.gr-assets.com/books/1372847500m/5907.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1372847500s/5907.jpg",
    },
    {
        "isbn13": 9780316769170,
        "authors": "J.D. Salinger",
        "publication_year": 1951,
        "original_title": "The Catcher in the Rye",
        "title": "The Catcher in the Rye",
        "ratings": (109383, 185520, 455042, 661516, 709176),
        "image_url": "https://images.gr-assets.com/books/1398034300m/5107.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1398034300s/5107.jpg",
    },
    {
        "isbn13": 9780679783270,
        "authors": "Jane Austen",
        "publication_year": 1813,
        "original_title": "Pride and Prejudice",
        "title": "Pride and Prejudice",
        "ratings": (54700, 86485, 284852, 609755, 1155673),
        "image_url": "https://images.gr-assets.com/books/1320399351m/1885.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1320399351s/1885.jpg",
    },
    {
        "isbn13": 9780451524940,
        "authors": "George Orwell, Erich Fromm, Celâl Üster",
        "publication_year": 1949,
        "original_title": "Nineteen Eighty-Four",
        "title": "1984",
        "ratings": (41845, 86425, 324874, 692021, 842973),
        "image_url": "https://images.gr-assets.com/books/1348990566m/5470.jpg",
        "image_small_url": "https://images.gr-assets.com/books/1348990566s/5470.jpg",
    },
]


def _book(sample: dict) -> Book:
    fields = {k: v for k, v in sample.items() if k != "ratings"}
    for star, count in enumerate(sample["ratings"], start=1):
        fields[f"rating_{star}_star"] = count
    return Book(**fields)


async def seed_books(session: AsyncSession) -> int:
    """Insert the sample books whose ISBN is not already stored. Returns the number inserted."""
    result = await session.execute(select(Book.isbn13))
    existing = set(result.scalars().all())

    books = [_book(sample) for sample in SAMPLE_BOOKS if sample["isbn13"] not in existing]
    session.add_all(books)
    await session.flush()
    return len(books)


async def seed():
    """Seed the database with sample data."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        created = await seed_books(session)
        await session.commit()

    if created:
        print(f"Created {created} books")
    else:
        print("Database already seeded. Skipping.")


if __name__ == "__main__":
    asyncio.run(seed())
