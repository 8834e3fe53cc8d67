"""
Whitelist and per-field value checks for book filter parameters.

Every filter that reaches the query builder has been classified here; a field
outside the whitelist or a value failing its rule stops the request before
any query text exists.
"""

from __future__ import annotations

import enum
import math
from decimal import Decimal
from typing import Any, Mapping, Union

VALID_PARAMS = (
    "isbn13",
    "authors",
    "publication_year",
    "original_title",
    "title",
)
RATING_PARAM = "rating"
FILTERABLE_PARAMS = VALID_PARAMS + (RATING_PARAM,)

# Largest values the INTEGER and BIGINT columns accept
INTEGER_MAX = 2**31 - 1
BIGINT_MAX = 2**63 - 1
COLUMN_LIMITS = {
    "isbn13": BIGINT_MAX,
    "publication_year": INTEGER_MAX,
}


class FilterKind(enum.Enum):
    EXACT = "exact"
    PARTIAL_TEXT = "partial_text"
    MIN_AVERAGE = "min_average"


FILTER_KINDS = {
    "isbn13": FilterKind.EXACT,
    "publication_year": FilterKind.EXACT,
    "authors": FilterKind.PARTIAL_TEXT,
    "original_title": FilterKind.PARTIAL_TEXT,
    "title": FilterKind.PARTIAL_TEXT,
    RATING_PARAM: FilterKind.MIN_AVERAGE,
}


class FilterValidationError(ValueError):
    """A filter field or value was rejected before query construction."""


def is_string_provided(candidate: Any) -> bool:
    return isinstance(candidate, str) and len(candidate) > 0


def is_number_provided(candidate: Any) -> bool:
    if isinstance(candidate, bool):
        return False
    if isinstance(candidate, (int, float)):
        return math.isfinite(candidate)
    if candidate is None or candidate == "":
        return False
    try:
        return math.isfinite(float(str(candidate)))
    except ValueError:
        return False


def is_valid_param(param: str) -> bool:
    return param in VALID_PARAMS


def is_filterable(param: str) -> bool:
    return param in FILTERABLE_PARAMS


def fits_column(param: str, value: Any) -> bool:
    """Integral and inside the range of the integer column behind ``param``."""
    number = Decimal(str(value).strip())
    if number != number.to_integral_value():
        return False
    limit = COLUMN_LIMITS[param]
    return -limit - 1 <= int(number) <= limit


def check_param(param: str, value: Any) -> bool:
    """Type policy for a whitelisted field's raw value."""
    if param == "isbn13":
        return is_number_provided(value) and len(str(value)) == 13 and fits_column(param, value)
    if param == "publication_year":
        return is_number_provided(value) and float(value) > 0 and fits_column(param, value)
    if param == RATING_PARAM:
        return is_number_provided(value)
    return is_string_provided(value)


def filter_kind(param: str) -> FilterKind:
    try:
        return FILTER_KINDS[param]
    except KeyError:
        raise FilterValidationError(f"'{param}' is not a filterable field") from None


def coerce_value(param: str, value: Any) -> Union[int, float, str]:
    """Bind-ready value for an already checked field."""
    kind = filter_kind(param)
    if kind is FilterKind.PARTIAL_TEXT:
        return str(value)
    if kind is FilterKind.EXACT:
        return int(Decimal(str(value).strip()))
    return float(value)


def validate_filters(params: Mapping[str, Any]) -> dict[str, Union[int, float, str]]:
    """
    Check every field and value, returning coerced values in input order.

    Raises:
        FilterValidationError: on the first unknown field or bad value
    """
    validated: dict[str, Union[int, float, str]] = {}
    for param, value in params.items():
        if not is_filterable(param):
            raise FilterValidationError(
                f"Invalid query parameter '{param}' - allowed: {', '.join(FILTERABLE_PARAMS)}"
            )
        if not check_param(param, value):
            raise FilterValidationError(
                f"Query parameter '{param}' not of required type - please refer to documentation"
            )
        validated[param] = coerce_value(param, value)
    return validated


def validate_isbn13(value: Any) -> int:
    """Path-key form of the isbn13 rule; additionally rejects non-digit input."""
    if not check_param("isbn13", value) or not str(value).isdigit():
        raise FilterValidationError("ISBN-13 must be a 13-digit number")
    return int(value)
