from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional

from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.common import success_response, paginated_response, window_response
from safedrive.schemas.notification import NotificationCreate, NotificationResponse
from safedrive.services.notification_service import NotificationService


router = APIRouter()


def serialize(notification) -> dict:
    return NotificationResponse.model_validate(notification).model_dump(mode="json")


@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    read: Optional[bool] = None,
    driver_id: Optional[str] = None,
    created_after: Optional[datetime] = None,
    organization_id: Optional[str] = None,
    sync_alerts: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List notifications, optionally backfilling them from recent alerts first"""
    service = NotificationService(db)
    if sync_alerts:
        await service.sync_recent_alerts(organization_id)

    result = await service.list_notifications(
        page=page,
        limit=limit,
        read=read,
        driver_id=driver_id,
        created_after=created_after,
        organization_id=organization_id,
    )
    return paginated_response([serialize(n) for n in result["items"]], result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = await NotificationService(db).create_notification(data)
    return success_response(serialize(notification), message="Notification created successfully")


@router.delete("")
async def clear_old_notifications(
    days_to_keep: int = Query(settings.NOTIFICATION_RETENTION_DAYS, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    removed = await NotificationService(db).clear_old(days_to_keep)
    return success_response({"removed": removed}, message=f"Removed {removed} old notifications")


@router.get("/unread-count")
async def unread_count(
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response({"count": await NotificationService(db).unread_count(organization_id)})


@router.get("/window")
async def notifications_window(
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    read: Optional[bool] = None,
    driver_id: Optional[str] = None,
    created_after: Optional[datetime] = None,
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, window, total = await NotificationService(db).window(
        scroll_top,
        row_height,
        visible_rows,
        read=read,
        driver_id=driver_id,
        created_after=created_after,
        organization_id=organization_id,
    )
    return window_response([serialize(n) for n in rows], window, row_height, visible_rows, total)


@router.patch("/mark-all-read")
async def mark_all_notifications_read(
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    count = await NotificationService(db).mark_all_as_read(organization_id)
    return success_response({"count": count}, message=f"Marked {count} notifications as read")


@router.get("/{notification_id}")
async def get_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(serialize(await NotificationService(db).get_notification(notification_id)))


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = await NotificationService(db).mark_as_read(notification_id)
    return success_response(serialize(notification), message="Notification marked as read")


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await NotificationService(db).delete_notification(notification_id)
    return success_response(message="Notification deleted successfully")
