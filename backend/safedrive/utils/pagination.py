"""
Pagination Utility Module

Page-based and scroll-window helpers shared by the list endpoints.
Both count the filtered query first and then load only the rows they need.
"""
import math
import time
from typing import Any, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.logging_config import logger
from safedrive.ui.windowing import VisibleWindow, compute_window


def _table_name(query: Select) -> str:
    froms = query.get_final_froms()
    return getattr(froms[0], "name", "query") if froms else "query"


async def count_rows(db: AsyncSession, query: Select) -> int:
    """Count the rows a query would return"""
    count_stmt = select(func.count()).select_from(query.order_by(None).subquery())
    result = await db.execute(count_stmt)
    return result.scalar() or 0


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 10,
    count_query: Optional[Select] = None
) -> dict:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base SQLAlchemy query (already ordered)
        page: Page number (1-indexed)
        limit: Items per page
        count_query: Optional custom count query

    Returns:
        Dictionary with items, total, page, limit, total_pages
    """
    page = max(1, page)
    limit = max(1, limit)

    if count_query is not None:
        total = (await db.execute(count_query)).scalar() or 0
    else:
        total = await count_rows(db, query)

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items = result.scalars().all()

    return create_paginated_response(items, total, page, limit)


def create_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    limit: int
) -> dict:
    """Build the paginated result dictionary"""
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


async def fetch_window(
    db: AsyncSession,
    query: Select,
    scroll_offset: float,
    row_height: int,
    visible_rows: int,
) -> Tuple[List[Any], VisibleWindow, int]:
    """
    Load only the rows visible at ``scroll_offset``.

    Returns:
        (rows in [start, end), the window, total row count)
    """
    total = await count_rows(db, query)
    window = compute_window(scroll_offset, row_height, visible_rows, total)

    if window.is_empty:
        return [], window, total

    started = time.perf_counter()
    result = await db.execute(query.offset(window.start_index).limit(window.size))
    rows = list(result.scalars().all())
    logger.log_db_query(
        "window",
        _table_name(query),
        (time.perf_counter() - started) * 1000,
        rows_affected=len(rows),
        start_index=window.start_index,
        end_index=window.end_index,
    )
    return rows, window, total
