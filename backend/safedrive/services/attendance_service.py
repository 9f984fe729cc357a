"""
Attendance Service - daily check-in / check-out per driver

Each driver has at most one record per day. Check-out closes the record
and stores the hours worked since check-in.
"""

from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.exceptions import (
    AttendanceRecordNotFoundError,
    AttendanceStateError,
    DuplicateResourceError,
    ValidationError,
)
from safedrive.core.logging_config import logger, set_driver_id
from safedrive.models.attendance import AttendanceRecord, AttendanceStatus
from safedrive.models.driver import Driver
from safedrive.schemas.attendance import AttendanceCheck
from safedrive.services.driver_service import DriverService
from safedrive.ui.windowing import VisibleWindow
from safedrive.utils.pagination import paginate, fetch_window


def date_range(start_date: Optional[date], end_date: Optional[date], today: Optional[date] = None) -> Tuple[date, date]:
    """Inclusive range; one given date means that day, none means today"""
    if start_date and end_date:
        return start_date, end_date
    single = start_date or end_date or today or datetime.utcnow().date()
    return single, single


def hours_between(started: datetime, ended: datetime) -> float:
    return round((ended - started).total_seconds() / 3600, 2)


class AttendanceService:
    """Service for daily attendance records"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        driver_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Select:
        first, last = date_range(start_date, end_date, today)
        query = select(AttendanceRecord).where(
            AttendanceRecord.date >= first,
            AttendanceRecord.date <= last,
        )
        if status is not None:
            query = query.where(AttendanceRecord.status == status)
        if driver_id:
            query = query.where(AttendanceRecord.driver_id == driver_id)
        return query.order_by(AttendanceRecord.date.desc(), AttendanceRecord.check_in_time.desc(), AttendanceRecord.id)

    async def list_records(self, page: int = 1, limit: int = 10, **filters: Any) -> dict:
        return await paginate(self.db, self._query(**filters), page=page, limit=limit)

    async def window(
        self,
        scroll_offset: float,
        row_height: int,
        visible_rows: int,
        **filters: Any,
    ) -> Tuple[List[AttendanceRecord], VisibleWindow, int]:
        return await fetch_window(self.db, self._query(**filters), scroll_offset, row_height, visible_rows)

    async def _todays_record(self, driver_id: str, today: date) -> Optional[AttendanceRecord]:
        result = await self.db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.driver_id == driver_id,
                AttendanceRecord.date == today,
            )
        )
        return result.scalar_one_or_none()

    async def _driver_for(self, data: AttendanceCheck) -> Driver:
        if not data.driver_id:
            raise ValidationError("Driver ID is required", field="driver_id")
        set_driver_id(data.driver_id)
        return await DriverService(self.db).get_driver(data.driver_id)

    async def check_in(self, data: AttendanceCheck, now: Optional[datetime] = None) -> AttendanceRecord:
        driver = await self._driver_for(data)
        now = now or datetime.utcnow()

        record = await self._todays_record(driver.id, now.date())
        if record is not None and record.check_in_time is not None:
            raise DuplicateResourceError("Driver has already checked in today", field="driver_id")

        if record is None:
            record = AttendanceRecord(driver_id=driver.id, date=now.date())
            self.db.add(record)
        record.check_in_time = now
        record.status = AttendanceStatus.PRESENT
        if data.location:
            record.location = data.location
        if data.notes:
            record.notes = data.notes

        await self.db.commit()
        await self.db.refresh(record)
        logger.info(f"[Attendance] {driver.driver_code} checked in")
        return record

    async def check_out(self, data: AttendanceCheck, now: Optional[datetime] = None) -> AttendanceRecord:
        driver = await self._driver_for(data)
        now = now or datetime.utcnow()

        record = await self._todays_record(driver.id, now.date())
        if record is None:
            raise AttendanceRecordNotFoundError(driver.id)
        if record.check_in_time is None:
            raise AttendanceStateError("Driver has not checked in yet")
        if record.check_out_time is not None:
            raise AttendanceStateError("Driver has already checked out today")

        record.check_out_time = now
        record.working_hours = hours_between(record.check_in_time, now)
        if data.notes:
            record.notes = data.notes

        await self.db.commit()
        await self.db.refresh(record)
        logger.info(f"[Attendance] {driver.driver_code} checked out after {record.working_hours}h")
        return record
