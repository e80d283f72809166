import math

from fastapi import Query

MAX_PAGE_SIZE = 100


class PageParams:
    """Query parameters shared by every paginated listing."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number, starting at 1"),
        limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Results per page"),
    ):
        self.page = page
        self.limit = limit

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def describe(self, total: int) -> dict:
        return {
            "current": self.page,
            "pages": math.ceil(total / self.limit),
            "total": total,
            "limit": self.limit,
        }

