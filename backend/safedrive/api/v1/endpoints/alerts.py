from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional

from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.core.exceptions import ValidationError
from safedrive.models.alert import AlertType, AlertSeverity
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.alert import AlertCreate, AlertResponse
from safedrive.schemas.common import success_response, paginated_response, window_response
from safedrive.services.alert_service import AlertService


router = APIRouter()

TEST_ALERT_KINDS = ("health", "alcohol", "drowsiness", "attendance", "object", "system", "all")


def serialize(alert) -> dict:
    return AlertResponse.model_validate(alert).model_dump(mode="json")


@router.get("")
async def list_alerts(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    alert_type: Optional[AlertType] = Query(None, alias="type"),
    severity: Optional[AlertSeverity] = None,
    is_read: Optional[bool] = None,
    created_after: Optional[datetime] = None,
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List alerts, newest first"""
    result = await AlertService(db).list_alerts(
        page=page,
        limit=limit,
        type=alert_type,
        severity=severity,
        is_read=is_read,
        created_after=created_after,
        organization_id=organization_id,
    )
    return paginated_response([serialize(a) for a in result["items"]], result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(
    data: AlertCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    alert = await AlertService(db).create_alert(data)
    return success_response(serialize(alert), message="Alert created successfully")


@router.get("/window")
async def alerts_window(
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    alert_type: Optional[AlertType] = Query(None, alias="type"),
    severity: Optional[AlertSeverity] = None,
    is_read: Optional[bool] = None,
    created_after: Optional[datetime] = None,
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Only the alerts visible at ``scroll_top`` in a virtualized table"""
    rows, window, total = await AlertService(db).window(
        scroll_top,
        row_height,
        visible_rows,
        type=alert_type,
        severity=severity,
        is_read=is_read,
        created_after=created_after,
        organization_id=organization_id,
    )
    return window_response([serialize(a) for a in rows], window, row_height, visible_rows, total)


@router.get("/stats")
async def alert_stats(
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(await AlertService(db).get_stats(organization_id))


@router.patch("/mark-all-read")
async def mark_all_alerts_read(
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    count = await AlertService(db).mark_all_as_read(organization_id)
    return success_response({"count": count}, message=f"Marked {count} alerts as read")


@router.post("/test")
async def create_test_alerts(
    kind: str = Query("all", alias="type"),
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Generate demo alerts"""
    if kind not in TEST_ALERT_KINDS:
        raise ValidationError(f"Unknown test alert type: {kind}", field="type")
    data = await AlertService(db).create_test_alerts(kind, organization_id)
    return success_response(data, message=f"Created test alerts of type: {kind}")


@router.get("/{alert_id}")
async def get_alert(
    alert_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(serialize(await AlertService(db).get_alert(alert_id)))


@router.patch("/{alert_id}/read")
async def mark_alert_read(
    alert_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    alert = await AlertService(db).mark_as_read(alert_id)
    return success_response(serialize(alert), message="Alert marked as read")


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await AlertService(db).delete_alert(alert_id)
    return success_response(message="Alert deleted successfully")
