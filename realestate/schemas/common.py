"""
Shared schema building blocks: camelCase base model, page metadata and the
uniform response envelope returned by every endpoint.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageMeta(CamelModel):
    """Pagination metadata for list responses."""

    page: int = Field(..., ge=1, description="Current page (1-based)")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Total number of matching items")
    last_page: int = Field(..., ge=0, description="Number of pages, 0 when nothing matches")


class Page(CamelModel):
    """One page of mapped results, as produced and cached by the list service."""

    data: List[Any] = Field(default_factory=list)
    meta: PageMeta


class ApiResponse(CamelModel, Generic[T]):
    """
    Uniform response envelope.
    `meta` is only populated for list responses.
    """

    success: bool = True
    status_code: int = 200
    message: str = "OK"
    data: Optional[T] = None
    meta: Optional[PageMeta] = None
    errors: List[str] = Field(default_factory=list)


def envelope(
    data: Any = None,
    message: str = "OK",
    status_code: int = 200,
    meta: Optional[PageMeta] = None,
) -> ApiResponse:
    """Wrap a successful result in the response envelope."""
    return ApiResponse(
        success=True,
        status_code=status_code,
        message=message,
        data=data,
        meta=meta,
    )
