from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.models.driver import Gender
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.alert import AlertResponse
from safedrive.schemas.common import success_response, paginated_response, window_response
from safedrive.schemas.driver import DriverCreate, DriverUpdate, DriverResponse, DriverStats, VitalsPayload
from safedrive.schemas.health_report import DriverHealthReport
from safedrive.services.alert_service import AlertService
from safedrive.services.driver_service import DriverService
from safedrive.services.health_report_service import HealthReportService


router = APIRouter()


def serialize(driver) -> dict:
    return DriverResponse.model_validate(driver).model_dump(mode="json")


@router.get("")
async def list_drivers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    search: Optional[str] = None,
    gender: Optional[Gender] = None,
    min_age: int = Query(0, ge=0),
    max_age: int = Query(100, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List drivers, newest first"""
    result = await DriverService(db).list_drivers(
        page=page,
        limit=limit,
        search=search,
        gender=gender,
        min_age=min_age,
        max_age=max_age,
    )
    return paginated_response([serialize(d) for d in result["items"]], result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    driver = await DriverService(db).create_driver(data)
    return success_response(serialize(driver), message="Driver created successfully")


@router.get("/stats")
async def driver_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = await DriverService(db).get_stats()
    return success_response(DriverStats(**stats).model_dump())


@router.get("/window")
async def drivers_window(
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    search: Optional[str] = None,
    gender: Optional[Gender] = None,
    min_age: int = Query(0, ge=0),
    max_age: int = Query(100, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, window, total = await DriverService(db).window(
        scroll_top,
        row_height,
        visible_rows,
        search=search,
        gender=gender,
        min_age=min_age,
        max_age=max_age,
    )
    return window_response([serialize(d) for d in rows], window, row_height, visible_rows, total)


@router.get("/{driver_id}")
async def get_driver(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(serialize(await DriverService(db).get_driver(driver_id)))


@router.put("/{driver_id}")
async def update_driver(
    driver_id: str,
    data: DriverUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    driver = await DriverService(db).update_driver(driver_id, data)
    return success_response(serialize(driver), message="Driver updated successfully")


@router.delete("/{driver_id}")
async def delete_driver(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await DriverService(db).delete_driver(driver_id)
    return success_response(message="Driver deleted successfully")


@router.post("/{driver_id}/vitals")
async def submit_vitals(
    driver_id: str,
    vitals: VitalsPayload,
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Evaluate a set of sensor readings against the health thresholds"""
    driver = await DriverService(db).get_driver(driver_id)
    alerts = await AlertService(db).check_and_create_alerts(
        driver.id,
        driver.name,
        vitals.model_dump(exclude_none=True),
        organization_id,
    )
    return success_response(
        [AlertResponse.model_validate(a).model_dump(mode="json") for a in alerts],
        message=f"{len(alerts)} alerts created",
    )


@router.get("/{driver_id}/health-report")
async def driver_health_report(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Latest health report of a driver with recommendations"""
    report = await HealthReportService(db).driver_report(driver_id)
    return success_response(DriverHealthReport.model_validate(report, from_attributes=True).model_dump(mode="json"))
