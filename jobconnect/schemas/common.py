from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    limit: int


class ApiResponse(BaseModel, Generic[T]):
    """Envelope used by every endpoint: ``{success, message?, data?}``."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
