"""
Response envelope and pagination schemas shared by every endpoint
"""

from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope"""
    status_code: int = 200
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True


class Page(BaseModel, Generic[T]):
    """One page of a sorted result set"""
    items: List[T]
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class ToggleResult(BaseModel):
    """Outcome of a like/subscription toggle"""
    state: Literal["added", "removed"]
    record: Optional[Any] = None


def success_response(data: Any = None, message: str = "Success", status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, data=data, message=message, success=status_code < 400)
