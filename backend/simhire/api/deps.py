from fastapi import Query
from typing import Any, Optional, Sequence

from simhire.schemas import Pagination


def get_pagination(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
) -> Optional[Pagination]:
    """Pagination is opt-in: without page/limit the whole collection is returned."""
    if limit is None and page == 1:
        return None
    return Pagination(page=page, limit=limit or 10)


def paginated(key: str, items: Sequence[Any], pagination: Optional[Pagination]) -> dict:
    """Build the list payload: {key: [...], total, page?, limit?}."""
    payload: dict = {"total": len(items)}
    if pagination is None:
        payload[key] = list(items)
        return payload
    start = pagination.offset
    payload[key] = list(items[start:start + pagination.limit])
    payload["page"] = pagination.page
    payload["limit"] = pagination.limit
    return payload
