"""Book routes — filtered reads, pagination, CRUD and rating mutation.

Every route requires an authenticated user.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.auth.dependencies import get_current_user
from books_api.config import get_settings
from books_api.database import get_db
from books_api.models.book import Book
from books_api.schemas.book import (
    BookCreate,
    BookCreatedResponse,
    BookListResponse,
    BookResponse,
    CursorPageResponse,
    OffsetPageResponse,
    RatingUpdate,
)
from books_api.services.mapper import to_book, to_books
from books_api.services.pagination import cursor_page, offset_page
from books_api.services.query_builder import books_query
from books_api.services.ratings import bucket_update
from books_api.services.validation import (
    FilterValidationError,
    validate_filters,
    validate_isbn13,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/books", tags=["Books"], dependencies=[Depends(get_current_user)])


def _bad_request(error: FilterValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _checked_filters(params: Mapping[str, Any]) -> dict:
    try:
        return validate_filters(params)
    except FilterValidationError as e:
        raise _bad_request(e)


def _checked_isbn(isbn13: str) -> int:
    try:
        return validate_isbn13(isbn13)
    except FilterValidationError as e:
        raise _bad_request(e)


async def _find(db: AsyncSession, filters: Optional[Mapping[str, Any]]) -> list[BookResponse]:
    result = await db.execute(books_query(filters))
    return to_books(b.as_row() for b in result.scalars().all())


@router.get("", response_model=BookListResponse)
async def list_books(request: Request, db: AsyncSession = Depends(get_db)):
    """All books ordered by id, narrowed by any whitelisted query parameters."""
    filters = _checked_filters(request.query_params)
    return BookListResponse(entries=await _find(db, filters))


@router.get("/search", response_model=BookListResponse)
async def search_books(request: Request, db: AsyncSession = Depends(get_db)):
    """Filtered list; at least one whitelisted query parameter is required."""
    if not request.query_params:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No query parameters supplied - please refer to documentation",
        )
    filters = _checked_filters(request.query_params)
    return BookListResponse(entries=await _find(db, filters))


@router.get("/offset", response_model=OffsetPageResponse)
async def list_books_offset(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await offset_page(db, get_settings().pagination, limit=limit, offset=offset)


@router.get("/cursor", response_model=CursorPageResponse)
async def list_books_cursor(
    limit: Optional[str] = None,
    cursor: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await cursor_page(db, get_settings().pagination, limit=limit, cursor=cursor)


@router.get("/isbns/{isbn13}", response_model=BookResponse)
async def get_book_by_isbn(isbn13: str, db: AsyncSession = Depends(get_db)):
    isbn = _checked_isbn(isbn13)
    books = await _find(db, {"isbn13": isbn})
    if not books:
        raise HTTPException(status_code=404, detail="Book not found for ISBN")
    return books[0]


@router.get("/authors/{authors}", response_model=BookListResponse)
async def get_books_by_author(authors: str, db: AsyncSession = Depends(get_db)):
    books = await _find(db, _checked_filters({"authors": authors}))
    if not books:
        raise HTTPException(status_code=404, detail="No books found for author")
    return BookListResponse(entries=books)


@router.get("/titles/{title}", response_model=BookListResponse)
async def get_books_by_title(title: str, db: AsyncSession = Depends(get_db)):
    books = await _find(db, _checked_filters({"title": title}))
    if not books:
        raise HTTPException(status_code=404, detail="No books found for title")
    return BookListResponse(entries=books)


@router.post("", response_model=BookCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_book(data: BookCreate, db: AsyncSession = Depends(get_db)):
    book = Book(**data.to_columns())
    db.add(book)
    await db.flush()

    logger.info("book_created", book_id=book.id, isbn13=book.isbn13)
    return BookCreatedResponse(message="Book added successfully", book=to_book(book.as_row()))


@router.put("/isbns/{isbn13}", response_model=BookResponse)
async def replace_book(isbn13: str, data: BookCreate, db: AsyncSession = Depends(get_db)):
    """Replace every descriptive field and star bucket of the book."""
    isbn = _checked_isbn(isbn13)
    result = await db.execute(
        update(Book)
        .where(Book.isbn13 == isbn)
        .values(**data.to_columns())
        .returning(Book)
        .execution_options(populate_existing=True)
    )
    books = result.scalars().all()
    if not books:
        raise HTTPException(status_code=404, detail="Book not found for ISBN")

    logger.info("book_replaced", isbn13=isbn, rows=len(books))
    return to_book(books[0].as_row())


@router.patch("/isbns/{isbn13}/ratings", response_model=BookResponse)
async def update_rating(isbn13: str, data: RatingUpdate, db: AsyncSession = Depends(get_db)):
    """Set, increment or decrement one star bucket in a single statement."""
    isbn = _checked_isbn(isbn13)
    result = await db.execute(
        update(Book)
        .where(Book.isbn13 == isbn)
        .values(bucket_update(data.star, data.amount, data.action))
        .returning(Book)
        .execution_options(populate_existing=True)
    )
    books = result.scalars().all()
    if not books:
        raise HTTPException(status_code=404, detail="Book not found for ISBN")

    logger.info(
        "rating_updated",
        isbn13=isbn,
        star=data.star,
        amount=data.amount,
        action=data.action.value,
    )
    return to_book(books[0].as_row())


@router.delete("/isbns/{isbn13}", response_model=BookResponse)
async def delete_book(isbn13: str, db: AsyncSession = Depends(get_db)):
    isbn = _checked_isbn(isbn13)
    result = await db.execute(delete(Book).where(Book.isbn13 == isbn).returning(Book))
    books = result.scalars().all()
    if not books:
        raise HTTPException(status_code=404, detail="Book not found for ISBN")

    logger.info("book_deleted", isbn13=isbn, rows=len(books))
    return to_book(books[0].as_row())


@router.delete("/authors/{authors}", response_model=BookListResponse)
async def delete_books_by_author(authors: str, db: AsyncSession = Depends(get_db)):
    """Delete every book whose authors string matches exactly."""
    result = await db.execute(delete(Book).where(Book.authors == authors).returning(Book))
    books = result.scalars().all()
    if not books:
        raise HTTPException(status_code=404, detail="No books found for author")

    logger.info("books_deleted_by_author", authors=authors, rows=len(books))
    return BookListResponse(entries=to_books(b.as_row() for b in books))
