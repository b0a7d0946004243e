"""Pagination utilities for list endpoints."""

from pydantic import BaseModel, Field


class OffsetParams(BaseModel):
    """Query parameters for offset pagination.

    Can be used as a query parameter model in FastAPI routes:
    ```python
    @router.get("/items")
    async def list_items(pagination: Annotated[OffsetParams, Query()]):
        stmt = stmt.offset(pagination.start).limit(pagination.limit)
    ```
    """

    start: int = Field(default=0, ge=0, description="Number of items to skip")
    limit: int = Field(default=10, ge=1, le=100, description="Maximum number of items to return")


__all__ = ["OffsetParams"]
