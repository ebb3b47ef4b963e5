"""
Shared query-parameter dependencies for list endpoints.
"""

from fastapi import Query

from school_admin.modules.shared.schemas import MAX_PAGE_SIZE


class ListParams:
    """Common pagination and search query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
        search: str | None = Query(None, max_length=100, description="Search term"),
    ):
        self.page = page
        self.limit = limit
        self.search = search.strip() if search else None

    def as_kwargs(self) -> dict:
        return {"page": self.page, "limit": self.limit, "search": self.search}
