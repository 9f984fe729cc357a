"""
Driver Service - driver roster management
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.config import settings
from safedrive.core.exceptions import DriverNotFoundError, DriverIdExhaustedError, ValidationError
from safedrive.core.logging_config import logger
from safedrive.models.attendance import AttendanceRecord
from safedrive.models.driver import Driver, Gender
from safedrive.models.health_report import HealthReport
from safedrive.schemas.driver import DriverCreate, DriverUpdate
from safedrive.ui.windowing import VisibleWindow
from safedrive.utils.pagination import paginate, fetch_window

DEFAULT_MIN_AGE = 0
DEFAULT_MAX_AGE = 100


def format_driver_code(number: int) -> str:
    return f"DRV-{number:03d}"


class DriverService:
    """Service for the driver roster"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(
        self,
        search: Optional[str] = None,
        gender: Optional[Gender] = None,
        min_age: int = DEFAULT_MIN_AGE,
        max_age: int = DEFAULT_MAX_AGE,
    ) -> Select:
        query = select(Driver)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Driver.name.ilike(pattern),
                Driver.phone.ilike(pattern),
                Driver.driver_code.ilike(pattern),
            ))
        if gender is not None:
            query = query.where(Driver.gender == gender)
        # Full default range means "no age filter"
        if min_age > DEFAULT_MIN_AGE or max_age < DEFAULT_MAX_AGE:
            query = query.where(Driver.age >= min_age, Driver.age <= max_age)
        return query.order_by(Driver.created_at.desc(), Driver.driver_code.desc())

    async def list_drivers(self, page: int = 1, limit: int = 10, **filters: Any) -> dict:
        return await paginate(self.db, self._query(**filters), page=page, limit=limit)

    async def window(
        self,
        scroll_offset: float,
        row_height: int,
        visible_rows: int,
        **filters: Any,
    ) -> Tuple[List[Driver], VisibleWindow, int]:
        return await fetch_window(self.db, self._query(**filters), scroll_offset, row_height, visible_rows)

    async def get_driver(self, driver_id: str) -> Driver:
        result = await self.db.execute(select(Driver).where(Driver.id == driver_id))
        driver = result.scalar_one_or_none()
        if not driver:
            raise DriverNotFoundError(driver_id)
        return driver

    async def generate_driver_code(self) -> str:
        """Next free DRV-nnn code, starting after the current driver count"""
        count = (await self.db.execute(select(func.count(Driver.id)))).scalar() or 0
        number = count + 1

        for _ in range(settings.DRIVER_ID_MAX_ATTEMPTS):
            code = format_driver_code(number)
            existing = await self.db.execute(select(Driver.id).where(Driver.driver_code == code))
            if existing.first() is None:
                return code
            number += 1

        logger.error(f"[Drivers] No free driver code after {settings.DRIVER_ID_MAX_ATTEMPTS} attempts")
        raise DriverIdExhaustedError(settings.DRIVER_ID_MAX_ATTEMPTS)

    async def create_driver(self, data: DriverCreate) -> Driver:
        missing = [
            name for name in ("name", "phone", "age", "gender")
            if getattr(data, name) is None or getattr(data, name) == ""
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

        driver = Driver(
            driver_code=await self.generate_driver_code(),
            **data.model_dump(),
        )
        self.db.add(driver)
        await self.db.commit()
        await self.db.refresh(driver)

        logger.info(f"[Drivers] Created {driver.driver_code} ({driver.name})")
        return driver

    async def update_driver(self, driver_id: str, data: DriverUpdate) -> Driver:
        driver = await self.get_driver(driver_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if key in ("name", "phone", "age", "gender") and value is None:
                continue
            setattr(driver, key, value)
        driver.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(driver)
        return driver

    async def delete_driver(self, driver_id: str) -> None:
        driver = await self.get_driver(driver_id)
        for model in (HealthReport, AttendanceRecord):
            await self.db.execute(delete(model).where(model.driver_id == driver.id))
        await self.db.delete(driver)
        await self.db.commit()
        logger.info(f"[Drivers] Deleted {driver.driver_code}")

    async def get_stats(self) -> Dict[str, int]:
        counts = {g: 0 for g in Gender}
        rows = await self.db.execute(select(Driver.gender, func.count(Driver.id)).group_by(Driver.gender))
        for gender, count in rows.all():
            counts[Gender(gender)] = count
        return {
            "total": sum(counts.values()),
            "male": counts[Gender.MALE],
            "female": counts[Gender.FEMALE],
            "other": counts[Gender.OTHER],
        }
