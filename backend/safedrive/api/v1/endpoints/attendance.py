from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.models.attendance import AttendanceStatus
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.attendance import AttendanceCheck, AttendanceResponse
from safedrive.schemas.common import success_response, paginated_response, window_response
from safedrive.services.attendance_service import AttendanceService


router = APIRouter()


def serialize(record) -> dict:
    return AttendanceResponse.model_validate(record).model_dump(mode="json")


@router.get("")
async def list_attendance(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[AttendanceStatus] = None,
    driver_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Attendance records in a date range (today when no dates are given)"""
    result = await AttendanceService(db).list_records(
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        status=status,
        driver_id=driver_id,
    )
    return paginated_response([serialize(r) for r in result["items"]], result)


@router.get("/window")
async def attendance_window(
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[AttendanceStatus] = None,
    driver_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, window, total = await AttendanceService(db).window(
        scroll_top,
        row_height,
        visible_rows,
        start_date=start_date,
        end_date=end_date,
        status=status,
        driver_id=driver_id,
    )
    return window_response([serialize(r) for r in rows], window, row_height, visible_rows, total)


@router.post("/check-in", status_code=status.HTTP_201_CREATED)
async def check_in(
    data: AttendanceCheck,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = await AttendanceService(db).check_in(data)
    return success_response(serialize(record), message="Check-in successful")


@router.post("/check-out")
async def check_out(
    data: AttendanceCheck,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = await AttendanceService(db).check_out(data)
    return success_response(serialize(record), message="Check-out successful")
