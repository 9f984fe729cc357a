from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from safedrive.models.driver import Gender
from safedrive.models.health_report import RiskLevel, StressLevel


class DriverSummary(BaseModel):
    """Driver fields embedded in health and attendance rows"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    driver_code: str
    name: str
    phone: str
    age: int
    gender: Gender
    profile_photo_url: Optional[str] = None


class HealthReportCreate(BaseModel):
    """risk_level is derived from the readings when left out"""
    driver_id: Optional[str] = None
    report_date: Optional[datetime] = None
    blood_pressure_high: Optional[int] = Field(None, ge=0, le=400)
    blood_pressure_low: Optional[int] = Field(None, ge=0, le=300)
    heart_rate: Optional[int] = Field(None, ge=0, le=300)
    stress_level: Optional[StressLevel] = None
    risk_level: Optional[RiskLevel] = None
    notes: Optional[str] = None


class HealthReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    driver_id: str
    report_date: datetime
    blood_pressure_high: Optional[int] = None
    blood_pressure_low: Optional[int] = None
    heart_rate: Optional[int] = None
    stress_level: Optional[StressLevel] = None
    risk_level: RiskLevel
    notes: Optional[str] = None
    created_at: datetime
    driver: Optional[DriverSummary] = None


class HealthTodayStats(BaseModel):
    date: str
    today_reports: int
    critical_cases: int
    critical_cases_overall: int
    overall_total_reports: int


class DriverHealthReport(BaseModel):
    driver: DriverSummary
    weight: Optional[float] = None
    height: Optional[float] = None
    latest_report: Optional[HealthReportResponse] = None
    recommendations: List[str]
