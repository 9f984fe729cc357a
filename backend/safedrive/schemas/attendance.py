from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date as date_type, datetime

from safedrive.models.attendance import AttendanceStatus
from safedrive.schemas.health_report import DriverSummary


class AttendanceCheck(BaseModel):
    """Body of check-in and check-out"""
    driver_id: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    driver_id: str
    date: date_type
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: AttendanceStatus
    working_hours: Optional[float] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    driver: Optional[DriverSummary] = None
