"""
Offset pagination over a SQLAlchemy select
"""

import math
from typing import Any, Callable, Dict, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import settings


def clamp_page(page: Optional[int], limit: Optional[int]) -> tuple:
    """Clamp page and limit to >= 1; limit is also capped at MAX_PAGE_SIZE"""
    page = max(int(page or 1), 1)
    limit = max(int(limit or settings.DEFAULT_PAGE_SIZE), 1)
    return page, min(limit, settings.MAX_PAGE_SIZE)


async def paginate(
    db: AsyncSession,
    query: Select,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
    transform: Optional[Callable[[Any], Any]] = None,
    scalars: bool = True
) -> Dict[str, Any]:
    """
    Run one page of `query`, keeping its ORDER BY

    Args:
        db: Database session
        query: Filtered and sorted select
        page: 1-based page number
        limit: Page size
        transform: Applied to each row of the page
        scalars: Return the first column of each row instead of the row

    Returns:
        Dictionary with items, page, limit, total_items, total_pages,
        has_next_page and has_prev_page
    """
    page, limit = clamp_page(page, limit)

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_items = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    rows = result.scalars().all() if scalars else result.all()
    items = [transform(row) for row in rows] if transform else list(rows)

    total_pages = math.ceil(total_items / limit) if total_items else 0

    return {
        "items": items,
        "page": page,
        "limit": limit,
        "total_items": total_items,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
