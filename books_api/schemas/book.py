"""Book schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from books_api.services.ratings import RatingAction
from books_api.services.validation import INTEGER_MAX, check_param


class BookCreate(BaseModel):
    isbn13: int
    authors: str = Field(..., min_length=1)
    publication_year: int = Field(..., ge=-INTEGER_MAX - 1, le=INTEGER_MAX)
    original_title: Optional[str] = None
    title: str = Field(..., min_length=1)
    rating_1: int = Field(0, ge=0, le=INTEGER_MAX)
    rating_2: int = Field(0, ge=0, le=INTEGER_MAX)
    rating_3: int = Field(0, ge=0, le=INTEGER_MAX)
    rating_4: int = Field(0, ge=0, le=INTEGER_MAX)
    rating_5: int = Field(0, ge=0, le=INTEGER_MAX)
    image_url: Optional[str] = None
    image_small_url: Optional[str] = None

    @field_validator("isbn13")
    @classmethod
    def isbn13_has_13_digits(cls, value: int) -> int:
        if value < 0 or not check_param("isbn13", value):
            raise ValueError("isbn13 must be a 13-digit number")
        return value

    def to_columns(self) -> dict:
        data = self.model_dump()
        for star in range(1, 6):
            data[f"rating_{star}_star"] = data.pop(f"rating_{star}")
        return data


class RatingUpdate(BaseModel):
    star: int = Field(..., ge=1, le=5)
    amount: int = Field(..., ge=0, le=INTEGER_MAX)
    action: RatingAction = RatingAction.SET


class Ratings(BaseModel):
    average: Optional[float]
    count: int
    rating_1: int
    rating_2: int
    rating_3: int
    rating_4: int
    rating_5: int


class Icons(BaseModel):
    large: Optional[str]
    small: Optional[str]


class BookResponse(BaseModel):
    id: int
    isbn13: int
    authors: str
    publication: int
    original_title: Optional[str]
    title: str
    ratings: Ratings
    icons: Icons


class BookCreatedResponse(BaseModel):
    message: str
    book: BookResponse


class BookListResponse(BaseModel):
    entries: list[BookResponse]


class OffsetPagination(BaseModel):
    totalRecords: int
    limit: int
    offset: int
    nextPage: int


class CursorPagination(BaseModel):
    totalRecords: int
    limit: int
    cursor: int


class OffsetPageResponse(BaseModel):
    entries: list[BookResponse]
    pagination: OffsetPagination


class CursorPageResponse(BaseModel):
    entries: list[BookResponse]
    pagination: CursorPagination
