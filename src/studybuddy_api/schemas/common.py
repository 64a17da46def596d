"""Common Pydantic v2 schemas shared across the API.

Provides pagination and error response schemas.
"""

import math

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    """Pagination metadata included in paginated responses."""

    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Items per page")
    total_pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, total: int, page: int, page_size: int) -> "PaginationMeta":
        """Compute ``total_pages`` from a total count."""
        return cls(total=total, page=page, page_size=page_size, total_pages=math.ceil(total / page_size))


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error message")
