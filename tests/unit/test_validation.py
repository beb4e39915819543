"""Unit tests for book and cart field rules."""

from datetime import datetime, timezone

import pytest

from app.core.errors import BookValidationError, CartValidationError
from app.services.validation import (
    check_book_values,
    check_quantity,
    check_required_book_fields,
    check_storable_book_values,
    is_blank,
    is_valid_url,
)


class TestRequiredBookFields:
    """Tests for the checks every single insert runs."""

    def test_complete_book_passes(self):
        check_required_book_fields({"title": "T", "author": "A", "price": 9.99})

    @pytest.mark.parametrize(
        "data",
        [
            {"author": "A", "price": 1},
            {"title": "", "author": "A", "price": 1},
            {"title": "   ", "author": "A", "price": 1},
            {"title": "T", "author": "", "price": 1},
            {"title": "T", "author": None, "price": 1},
        ],
    )
    def test_missing_title_or_author(self, data):
        with pytest.raises(BookValidationError, match="Title and author required"):
            check_required_book_fields(data)

    @pytest.mark.parametrize("price", [None, "9.99", True])
    def test_price_must_be_numeric(self, price):
        with pytest.raises(BookValidationError, match="Price"):
            check_required_book_fields({"title": "T", "author": "A", "price": price})

    def test_zero_price_is_numeric(self):
        check_required_book_fields({"title": "T", "author": "A", "price": 0})


class TestStrictBookValues:
    """Tests for strict-mode value checks."""

    def test_only_present_fields_are_checked(self):
        check_book_values({"genre": "Poetry"})

    @pytest.mark.parametrize("price", [0, -5, "12"])
    def test_price_must_be_positive(self, price):
        with pytest.raises(BookValidationError, match="positive"):
            check_book_values({"price": price})

    def test_empty_title_rejected(self):
        with pytest.raises(BookValidationError, match="Title"):
            check_book_values({"title": ""})

    @pytest.mark.parametrize("field", ["title", "author"])
    def test_single_character_name_rejected(self, field):
        with pytest.raises(BookValidationError, match="at least 2 characters"):
            check_book_values({field: " x "})

    def test_two_character_names_accepted(self):
        check_book_values({"title": "It", "author": "Al"})

    @pytest.mark.parametrize("year", [999, datetime.now(tz=timezone.utc).year + 1, "1999"])
    def test_published_year_range(self, year):
        with pytest.raises(BookValidationError, match="Published year"):
            check_book_values({"published_year": year})

    def test_published_year_none_allowed(self):
        check_book_values({"published_year": None})

    def test_invalid_image_url(self):
        with pytest.raises(BookValidationError, match="Image URL"):
            check_book_values({"image_url": "not a url"})

    def test_valid_image_url(self):
        check_book_values({"image_url": "https://example.com/cover.png"})


class TestHelpers:
    """Tests for small helpers."""

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank(" ")
        assert not is_blank("x")
        assert not is_blank(0)

    def test_is_valid_url(self):
        assert is_valid_url("http://example.com")
        assert not is_valid_url("ftp://example.com")
        assert not is_valid_url("example.com")


class TestQuantity:
    """Tests for strict quantity checks."""

    @pytest.mark.parametrize("quantity", [0, -1, None, 1.5, True])
    def test_rejects_non_positive_or_non_int(self, quantity):
        with pytest.raises(CartValidationError):
            check_quantity(quantity)

    def test_accepts_positive_int(self):
        check_quantity(3)


class TestStorableBookValues:
    """Tests for the column type checks applied in every mode."""

    def test_missing_values_pass(self):
        check_storable_book_values({"price": None, "published_year": None})

    @pytest.mark.parametrize("price", ["n/a", "12", True])
    def test_non_numeric_price_rejected(self, price):
        with pytest.raises(BookValidationError, match="Price must be a number"):
            check_storable_book_values({"price": price})

    @pytest.mark.parametrize("year", ["1999", 1999.5])
    def test_non_integer_year_rejected(self, year):
        with pytest.raises(BookValidationError, match="Published year"):
            check_storable_book_values({"published_year": year})
