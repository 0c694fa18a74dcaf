"""
Tests for field validation, list filters and request decode messages.

None of these touch the database or the HTTP layer.
"""

from datetime import datetime

import pytest

from bookshelf.errors import describe_decode_error
from bookshelf.filters import Filters, calculate_metadata, validate_filters
from bookshelf.models import Book, validate_book
from bookshelf.validator import Validator, permitted_value

SAFELIST = ("id", "title", "year", "-id", "-title", "-year")


# =============================================================================
# Validator
# =============================================================================


class TestValidator:
    """Tests for the Validator error collector."""

    def test_new_validator_is_valid(self):
        assert Validator().valid()

    def test_check_records_failure(self):
        v = Validator()
        v.check(False, "title", "must be provided")

        assert not v.valid()
        assert v.errors == {"title": "must be provided"}

    def test_check_passing_records_nothing(self):
        v = Validator()
        v.check(True, "title", "must be provided")

        assert v.errors == {}

    def test_first_error_per_field_wins(self):
        """A later failure on the same field does not overwrite the first."""
        v = Validator()
        v.add_error("year", "must be provided")
        v.add_error("year", "must be greater than 1888")

        assert v.errors == {"year": "must be provided"}

    def test_permitted_value(self):
        assert permitted_value("id", *SAFELIST)
        assert not permitted_value("pages", *SAFELIST)


# =============================================================================
# Book Rules
# =============================================================================


class TestValidateBook:
    """Tests for validate_book."""

    def errors_for(self, **fields) -> dict[str, str]:
        v = Validator()
        validate_book(v, Book(**fields))
        return v.errors

    def test_valid_book(self):
        assert self.errors_for(title="Fahrenheit 451", year=1953, pages=158) == {}

    def test_zero_values_must_be_provided(self):
        """An empty create body decodes to zero values for every field."""
        errors = self.errors_for(title="", year=0, pages=0)

        assert errors == {
            "title": "must be provided",
            "year": "must be provided",
            "pages": "must be provided",
        }

    def test_title_length_is_counted_in_bytes(self):
        # 250 two-byte characters are exactly 500 bytes
        assert "title" not in self.errors_for(title="é" * 250, year=1953, pages=1)

        errors = self.errors_for(title="é" * 251, year=1953, pages=1)
        assert errors["title"] == "must not be more than 500 bytes long"

    def test_year_range(self):
        assert "year" not in self.errors_for(title="A", year=1888, pages=1)
        assert self.errors_for(title="A", year=1887, pages=1)["year"] == (
            "must be greater than 1888"
        )

        next_year = datetime.now().year + 1
        assert self.errors_for(title="A", year=next_year, pages=1)["year"] == (
            "must not be in the future"
        )

    def test_pages_must_be_positive(self):
        errors = self.errors_for(title="A", year=1953, pages=-5)
        assert errors == {"pages": "must be a positive integer"}


# =============================================================================
# Filters
# =============================================================================


class TestFilters:
    """Tests for Filters and validate_filters."""

    def test_ascending_sort(self):
        filters = Filters(page=1, page_size=20, sort="title", sort_safelist=SAFELIST)

        assert filters.sort_column == "title"
        assert filters.sort_direction == "ASC"

    def test_descending_sort(self):
        filters = Filters(page=1, page_size=20, sort="-year", sort_safelist=SAFELIST)

        assert filters.sort_column == "year"
        assert filters.sort_direction == "DESC"

    def test_unsafe_sort_column_raises(self):
        filters = Filters(sort="pages; DROP TABLE books", sort_safelist=SAFELIST)

        with pytest.raises(ValueError, match="unsafe sort parameter"):
            filters.sort_column

    @pytest.mark.parametrize(
        "page,page_size,offset",
        [(1, 20, 0), (2, 20, 20), (3, 5, 10)],
    )
    def test_limit_and_offset(self, page, page_size, offset):
        filters = Filters(page=page, page_size=page_size, sort_safelist=SAFELIST)

        assert filters.limit == page_size
        assert filters.offset == offset

    def test_valid_filters(self):
        v = Validator()
        validate_filters(v, Filters(page=1, page_size=100, sort="-id", sort_safelist=SAFELIST))

        assert v.valid()

    def test_invalid_filters_report_every_field(self):
        v = Validator()
        validate_filters(v, Filters(page=0, page_size=101, sort="pages", sort_safelist=SAFELIST))

        assert v.errors == {
            "page": "must be greater than zero",
            "page_size": "must be a maximum of 100",
            "sort": "invalid sort value",
        }

    def test_page_upper_bound(self):
        v = Validator()
        validate_filters(v, Filters(page=10_000_001, sort_safelist=SAFELIST))

        assert v.errors == {"page": "must be a maximum of 10 million"}

    def test_page_size_must_be_positive(self):
        v = Validator()
        validate_filters(v, Filters(page_size=0, sort_safelist=SAFELIST))

        assert v.errors == {"page_size": "must be greater than zero"}


class TestCalculateMetadata:
    """Tests for calculate_metadata."""

    def test_empty_result_is_all_zero(self):
        metadata = calculate_metadata(0, 1, 20)

        assert metadata.model_dump() == {
            "current_page": 0,
            "page_size": 0,
            "first_page": 0,
            "last_page": 0,
            "total_records": 0,
        }

    def test_partial_last_page(self):
        metadata = calculate_metadata(12, 2, 5)

        assert metadata.current_page == 2
        assert metadata.page_size == 5
        assert metadata.first_page == 1
        assert metadata.last_page == 3
        assert metadata.total_records == 12

    def test_exact_last_page(self):
        assert calculate_metadata(40, 1, 20).last_page == 2


# =============================================================================
# Decode Errors
# =============================================================================


class TestDescribeDecodeError:
    """Tests for describe_decode_error."""

    def test_badly_formed_json(self):
        errors = [{"type": "json_invalid", "loc": ("body", 7), "msg": "JSON decode error"}]

        assert describe_decode_error(errors) == "body contains badly-formed JSON"

    def test_unknown_key(self):
        errors = [{"type": "extra_forbidden", "loc": ("body", "rating")}]

        assert describe_decode_error(errors) == 'body contains unknown key "rating"'

    def test_empty_body(self):
        errors = [{"type": "missing", "loc": ("body",)}]

        assert describe_decode_error(errors) == "body must not be empty"

    def test_wrong_type_for_field(self):
        errors = [{"type": "int_type", "loc": ("body", "year")}]

        assert describe_decode_error(errors) == (
            'body contains incorrect JSON type for field "year"'
        )

    def test_wrong_top_level_type(self):
        errors = [{"type": "model_attributes_type", "loc": ("body",)}]

        assert describe_decode_error(errors) == "body must contain a single JSON object"
