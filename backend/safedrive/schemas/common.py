"""Response envelope shared by every JSON endpoint"""
import math
from typing import Any, Dict, Optional

from pydantic import BaseModel

from safedrive.ui.windowing import VisibleWindow, content_height, viewport_height


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class WindowMeta(BaseModel):
    start_index: int
    end_index: int
    pixel_offset: int
    content_height: int
    viewport_height: int
    row_height: int
    visible_rows: int
    total: int


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    ).model_dump()


def window_meta(window: VisibleWindow, row_height: int, visible_rows: int, total: int) -> Dict[str, int]:
    return WindowMeta(
        start_index=window.start_index,
        end_index=window.end_index,
        pixel_offset=window.pixel_offset,
        content_height=content_height(total, row_height),
        viewport_height=viewport_height(visible_rows, row_height),
        row_height=row_height,
        visible_rows=visible_rows,
        total=total,
    ).model_dump()


def success_response(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Build ``{"success": true, "data": ...}`` plus optional message/pagination/window"""
    body: Dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    body.update(extra)
    return body


def window_response(
    items: Any,
    window: VisibleWindow,
    row_height: int,
    visible_rows: int,
    total: int,
) -> Dict[str, Any]:
    return success_response(items, window=window_meta(window, row_height, visible_rows, total))


def paginated_response(items: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    """Envelope for the dict returned by ``utils.pagination.paginate``"""
    return success_response(
        items,
        pagination=pagination_meta(result["page"], result["limit"], result["total"]),
    )
