from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope for single-object responses."""

    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Success envelope for unpaginated lists."""

    success: bool = True
    count: int
    data: list[T]


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic limit/offset paginated response schema."""

    success: bool = True
    data: list[T]
    pagination: Pagination
