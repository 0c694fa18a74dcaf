"""
Filtering, Sorting and Pagination

Turns list query parameters into the pieces the book store needs:

- a sort column and direction, taken only from a fixed safelist so a client
  can never inject an arbitrary ORDER BY expression
- LIMIT/OFFSET values for offset-based pagination
- response metadata computed from the total match count

Nothing here touches the database.
"""

import math

from bookshelf.schemas.book import Metadata
from bookshelf.validator import Validator, permitted_value

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


class Filters:
    """
    Page, page size and sort order for a list query.

    sort is one of sort_safelist; a leading "-" means descending.

        Filters(page=2, page_size=20, sort="-year", sort_safelist=[...])
        .sort_column     -> "year"
        .sort_direction  -> "DESC"
        .offset          -> 20
    """

    def __init__(
        self,
        page: int = 1,
        page_size: int = 20,
        sort: str = "id",
        sort_safelist: tuple[str, ...] | list[str] = ("id",),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort
        self.sort_safelist = tuple(sort_safelist)

    @property
    def sort_column(self) -> str:
        """
        Column name for ORDER BY.

        Raises:
            ValueError: If sort is not in the safelist. validate_filters()
                should have rejected it already, so this is a programming
                error rather than bad client input.
        """
        if self.sort not in self.sort_safelist:
            raise ValueError(f"unsafe sort parameter: {self.sort}")
        return self.sort.removeprefix("-")

    @property
    def sort_direction(self) -> str:
        """ASC, or DESC when sort has a leading "-"."""
        return "DESC" if self.sort.startswith("-") else "ASC"

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        """Rows to skip: page 1 → 0, page 2 → page_size, and so on."""
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    """Record page, page_size and sort failures on v."""
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(
        filters.page_size <= MAX_PAGE_SIZE,
        "page_size",
        "must be a maximum of 100",
    )
    v.check(
        permitted_value(filters.sort, *filters.sort_safelist),
        "sort",
        "invalid sort value",
    )


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    """
    Build pagination metadata for a query result.

    An empty result gives all-zero metadata rather than an error.
    """
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )
