"""Offset pagination — query filters and response metadata.

Listings take ?page=&page_size= and return a "_metadata" object next to
the records. Metadata is empty when there is nothing to page through.
"""

import math
from dataclasses import dataclass

from fastapi import Query
from pydantic import BaseModel

from starbloom.errors import ValidationFailed

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 1000


class Metadata(BaseModel):
    current_page: int | None = None
    page_size: int | None = None
    first_page: int | None = None
    last_page: int | None = None
    total_records: int | None = None


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


@dataclass(frozen=True)
class Filter:
    page: int = 1
    page_size: int = 10
    sort: str = "-created_at"

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def sort_column(self) -> str:
        return self.sort.lstrip("-")

    @property
    def sort_descending(self) -> bool:
        return self.sort.startswith("-")


def filter_params(default_page_size: int, sort_safelist: tuple[str, ...]):
    """Build a FastAPI dependency that reads and validates listing filters.

    The first safelist entry is the default sort. A leading "-" sorts
    descending.
    """

    def dependency(
        page: int = Query(1, ge=1, le=MAX_PAGE),
        page_size: int = Query(default_page_size, ge=1, le=MAX_PAGE_SIZE),
        sort: str = Query(sort_safelist[0]),
    ) -> Filter:
        if sort not in sort_safelist:
            raise ValidationFailed({"sort": "invalid sort value"})
        return Filter(page=page, page_size=page_size, sort=sort)

    return dependency
