"""Book ORM model.

The five star buckets are the only stored rating data; average and count are
always derived from them (see ``books_api.services.ratings``).
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from books_api.database import Base

STAR_COLUMNS = (
    "rating_1_star",
    "rating_2_star",
    "rating_3_star",
    "rating_4_star",
    "rating_5_star",
)


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    isbn13: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    authors: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    publication_year: Mapped[int] = mapped_column(Integer, nullable=False)
    original_title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    rating_1_star: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    rating_2_star: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    rating_3_star: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    rating_4_star: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    rating_5_star: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_small_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def as_row(self) -> dict[str, Any]:
        """Flat column-name → value mapping, as returned by a raw query."""
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}

    def __repr__(self) -> str:
        return f"<Book id={self.id} isbn13={self.isbn13} title={self.title!r}>"
