from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.models.health_report import RiskLevel, StressLevel
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.common import success_response, paginated_response, window_response
from safedrive.schemas.health_report import HealthReportCreate, HealthReportResponse, HealthTodayStats
from safedrive.services.health_report_service import HealthReportService


router = APIRouter()


def serialize(report) -> dict:
    return HealthReportResponse.model_validate(report).model_dump(mode="json")


@router.get("")
async def list_health_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(15, ge=1, le=500),
    driver_id: Optional[str] = None,
    risk_level: Optional[RiskLevel] = None,
    stress_level: Optional[StressLevel] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List health reports, latest report date first"""
    result = await HealthReportService(db).list_reports(
        page=page,
        limit=limit,
        driver_id=driver_id,
        risk_level=risk_level,
        stress_level=stress_level,
        search=search,
    )
    return paginated_response([serialize(r) for r in result["items"]], result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_health_report(
    data: HealthReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = await HealthReportService(db).create_report(data)
    return success_response(serialize(report), message="Health report created successfully")


@router.get("/window")
async def health_reports_window(
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    driver_id: Optional[str] = None,
    risk_level: Optional[RiskLevel] = None,
    stress_level: Optional[StressLevel] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, window, total = await HealthReportService(db).window(
        scroll_top,
        row_height,
        visible_rows,
        driver_id=driver_id,
        risk_level=risk_level,
        stress_level=stress_level,
        search=search,
    )
    return window_response([serialize(r) for r in rows], window, row_height, visible_rows, total)


@router.get("/count")
async def health_report_count(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(await HealthReportService(db).counts())


@router.get("/today-stats")
async def health_today_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Today's report count and how many of them need attention"""
    stats = await HealthReportService(db).today_stats()
    return success_response(HealthTodayStats(**stats).model_dump())


@router.get("/check-dates")
async def health_check_dates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(await HealthReportService(db).check_dates())
