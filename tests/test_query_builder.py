"""Dynamic filter construction."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import operators

from books_api.services.query_builder import books_query, build_filter, escape_like
from books_api.services.validation import FilterValidationError, validate_filters


def _shape(comparison):
    """(column, operator, bind name, bound value) of one comparison."""
    left = comparison.left
    column = getattr(left, "key", None) if hasattr(left, "table") else None
    return column, comparison.operator, comparison.right.key, comparison.right.value


class TestBuildFilter:
    def test_partial_title_match(self):
        built = build_filter({"title": "Hobbit"})
        assert built.args == ["%Hobbit%"]
        (comparison,) = built.comparisons
        assert _shape(comparison) == ("title", operators.ilike_op, "p1", "%Hobbit%")
        assert comparison.modifiers["escape"] == "\\"

    def test_exact_isbn_match(self):
        built = build_filter({"isbn13": 9780547928227})
        assert built.args == [9780547928227]
        (comparison,) = built.comparisons
        assert _shape(comparison) == ("isbn13", operators.eq, "p1", 9780547928227)

    def test_rating_compares_derived_average(self):
        built = build_filter({"rating": 4.0})
        (comparison,) = built.comparisons
        _, op, name, value = _shape(comparison)
        assert (op, name, value) == (operators.ge, "p1", 4.0)
        assert str(comparison.left.compile(dialect=postgresql.dialect())).startswith("CASE WHEN")
        assert built.args == [4.0]

    def test_clauses_follow_mapping_order(self):
        built = build_filter({"authors": "Tolkien", "publication_year": 1937, "title": "Hobbit"})
        assert [_shape(c) for c in built.comparisons] == [
            ("authors", operators.ilike_op, "p1", "%Tolkien%"),
            ("publication_year", operators.eq, "p2", 1937),
            ("title", operators.ilike_op, "p3", "%Hobbit%"),
        ]
        assert built.args == ["%Tolkien%", 1937, "%Hobbit%"]

    def test_deterministic(self):
        filters = {"title": "Hobbit", "rating": 3.5, "isbn13": 9780547928227}
        first = build_filter(filters)
        second = build_filter(filters)
        assert [c.right.key for c in first.comparisons] == [c.right.key for c in second.comparisons]
        assert first.args == second.args
        assert filters == {"title": "Hobbit", "rating": 3.5, "isbn13": 9780547928227}

    def test_user_input_never_reaches_query_text(self):
        hostile = "x'; DROP TABLE books; --"
        built = build_filter({"title": hostile})
        assert "DROP TABLE" not in str(built.clause.compile(dialect=postgresql.dialect()))
        assert built.args == [f"%{hostile}%"]

    def test_compiled_params_match_args(self):
        built = build_filter({"title": "Hobbit", "publication_year": 1937})
        compiled = built.clause.compile(dialect=postgresql.dialect())
        assert compiled.params == {"p1": "%Hobbit%", "p2": 1937}

    def test_like_wildcards_match_literally(self):
        built = build_filter({"title": "100%_x"})
        assert built.args == ["%100\\%\\_x%"]

    def test_empty_filter_rejected(self):
        with pytest.raises(FilterValidationError):
            build_filter({})

    def test_unknown_field_rejected_before_sql(self):
        with pytest.raises(FilterValidationError):
            build_filter({"id": 1})

    def test_validated_then_built(self):
        built = build_filter(validate_filters({"publication_year": "1937"}))
        assert built.args == [1937]


class TestEscapeLike:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Tolkien", "Tolkien"),
            ("%", "\\%"),
            ("a_b", "a\\_b"),
            ("back\\slash", "back\\\\slash"),
        ],
    )
    def test_escape(self, value, expected):
        assert escape_like(value) == expected


class TestBooksQuery:
    def test_no_filters_selects_all_by_id(self):
        sql = str(books_query().compile(dialect=postgresql.dialect()))
        assert "WHERE" not in sql
        assert sql.endswith("ORDER BY books.id")

    def test_filters_add_where(self):
        sql = str(books_query({"title": "Hobbit"}).compile(dialect=postgresql.dialect()))
        assert "WHERE books.title ILIKE %(p1)s" in sql
        assert sql.endswith("ORDER BY books.id")
