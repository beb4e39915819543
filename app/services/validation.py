"""Field rules for book and cart records."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from app.core.errors import BookValidationError, CartValidationError

MIN_PUBLISHED_YEAR = 1000
MIN_NAME_LENGTH = 2


def is_blank(value: Any) -> bool:
    """Missing, or a string that is empty after stripping whitespace."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def check_required_book_fields(data: Mapping[str, Any]) -> None:
    """Checks applied to every single-book insert, lenient or strict."""
    if is_blank(data.get("title")) or is_blank(data.get("author")):
        raise BookValidationError("Title and author required")
    if not is_number(data.get("price")):
        raise BookValidationError("Price must be a number")


def check_storable_book_values(data: Mapping[str, Any]) -> None:
    """Type checks every write needs, since the numeric columns cannot hold text.

    Applied in lenient mode too, so a bad value is reported as invalid input
    rather than surfacing from the database driver.
    """
    price = data.get("price")
    if price is not None and not is_number(price):
        raise BookValidationError("Price must be a number")

    year = data.get("published_year")
    if year is not None and (not isinstance(year, int) or isinstance(year, bool)):
        raise BookValidationError("Published year must be a whole number")


def check_book_values(data: Mapping[str, Any]) -> None:
    """Strict checks on whichever book fields are present in ``data``."""
    for field in ("title", "author"):
        if field in data and (
            is_blank(data[field]) or len(str(data[field]).strip()) < MIN_NAME_LENGTH
        ):
            raise BookValidationError(
                f"{field.capitalize()} must be at least {MIN_NAME_LENGTH} characters"
            )

    if "price" in data:
        price = data["price"]
        if not is_number(price) or price <= 0:
            raise BookValidationError("Price must be a positive number")

    year = data.get("published_year")
    if year is not None:
        current_year = datetime.now(tz=timezone.utc).year
        if (
            not isinstance(year, int)
            or isinstance(year, bool)
            or not MIN_PUBLISHED_YEAR <= year <= current_year
        ):
            raise BookValidationError(
                f"Published year must be between {MIN_PUBLISHED_YEAR} and {current_year}"
            )

    image_url = data.get("image_url")
    if image_url is not None and not (isinstance(image_url, str) and is_valid_url(image_url)):
        raise BookValidationError("Image URL must be a valid http(s) URL")


def check_quantity(quantity: Any) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise CartValidationError("Quantity must be a positive integer")
