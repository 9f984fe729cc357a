"""
Health Report Service - periodic checkups per driver

A report carries blood pressure, resting heart rate and a stress level.
When no risk level is given it is graded from those readings.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.exceptions import ValidationError
from safedrive.core.logging_config import logger
from safedrive.models.driver import Driver
from safedrive.models.health_report import HealthReport, RiskLevel, StressLevel
from safedrive.schemas.health_report import HealthReportCreate
from safedrive.services.driver_service import DriverService
from safedrive.ui.windowing import VisibleWindow
from safedrive.utils.pagination import count_rows, paginate, fetch_window

# (level, systolic >=, diastolic >=, heart rate >, stress) checked top down
RISK_BANDS = (
    (RiskLevel.CRITICAL, 160, 100, 110, StressLevel.VERY_HIGH),
    (RiskLevel.HIGH, 140, 90, 100, StressLevel.HIGH),
    (RiskLevel.MEDIUM, 130, 80, 90, StressLevel.MILD),
    (RiskLevel.LOW, 120, 70, 80, None),
)

CRITICAL_RISK_LEVELS = (RiskLevel.CRITICAL, RiskLevel.HIGH)
NORMAL_HEART_RATE = (60, 100)

RECENT_DATES_LIMIT = 10


def assess_risk(
    blood_pressure_high: Optional[int],
    blood_pressure_low: Optional[int],
    heart_rate: Optional[int],
    stress_level: Optional[StressLevel] = None,
) -> RiskLevel:
    """Grade a reading; incomplete vitals stay NORMAL"""
    if blood_pressure_high is None or blood_pressure_low is None or heart_rate is None:
        return RiskLevel.NORMAL

    for level, systolic, diastolic, pulse, stress in RISK_BANDS:
        if (
            blood_pressure_high >= systolic
            or blood_pressure_low >= diastolic
            or heart_rate > pulse
            or (stress is not None and stress_level == stress)
        ):
            return level
    return RiskLevel.NORMAL


def body_mass_index(weight: Optional[float], height: Optional[float]) -> Optional[float]:
    """kg and cm in, None when either is unknown"""
    if not weight or not height:
        return None
    meters = height / 100
    return weight / (meters * meters)


def recommendations_for(driver: Driver, report: Optional[HealthReport]) -> List[str]:
    """Advice for a driver based on their latest report, age and BMI"""
    if report is None:
        return ["Schedule a comprehensive health checkup to establish baseline metrics."]

    advice: List[str] = []

    systolic, diastolic = report.blood_pressure_high, report.blood_pressure_low
    if systolic and diastolic:
        if systolic >= 140 or diastolic >= 90:
            advice += [
                "High blood pressure detected. Consult with a healthcare provider immediately.",
                "Reduce sodium intake and increase physical activity.",
                "Monitor blood pressure daily and maintain a log.",
            ]
        elif systolic >= 130 or diastolic >= 80:
            advice += [
                "Elevated blood pressure. Consider lifestyle modifications to prevent hypertension.",
                "Implement stress reduction techniques such as meditation or deep breathing exercises.",
            ]

    if report.heart_rate:
        if report.heart_rate > 100:
            advice += [
                "Elevated resting heart rate detected. Consider cardiovascular evaluation.",
                "Ensure adequate hydration and avoid excessive caffeine intake.",
            ]
        elif report.heart_rate < 60 and driver.age > 40:
            advice.append("Low heart rate detected. Monitor for symptoms of dizziness or fatigue.")

    if report.stress_level in (StressLevel.HIGH, StressLevel.VERY_HIGH):
        advice += [
            "High stress levels detected. Consider stress management counseling.",
            "Practice regular relaxation techniques and ensure adequate sleep (7-9 hours).",
            "Take regular breaks during long driving periods.",
        ]

    if driver.age >= 55:
        advice += [
            "Regular vision and hearing tests recommended for drivers over 55.",
            "Consider annual medical clearance for continued driving duties.",
        ]

    if not advice:
        advice += [
            "Maintain current healthy habits and continue regular health monitoring.",
            "Stay hydrated and take regular breaks during long driving periods.",
        ]

    # Weight advice is added on top of the general advice
    bmi = body_mass_index(driver.weight, driver.height)
    if bmi is not None:
        if bmi >= 30:
            advice.append("Consider weight management program to improve overall health and driving comfort.")
        elif bmi >= 25:
            advice.append("Maintain healthy weight through balanced diet and regular exercise.")

    return advice


def day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    start = (now or datetime.utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def is_critical_clause():
    low, high = NORMAL_HEART_RATE
    return or_(
        HealthReport.heart_rate < low,
        HealthReport.heart_rate > high,
        HealthReport.risk_level.in_(CRITICAL_RISK_LEVELS),
    )


class HealthReportService:
    """Service for driver health reports"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(
        self,
        driver_id: Optional[str] = None,
        risk_level: Optional[RiskLevel] = None,
        stress_level: Optional[StressLevel] = None,
        search: Optional[str] = None,
    ) -> Select:
        query = select(HealthReport)
        if driver_id:
            query = query.where(HealthReport.driver_id == driver_id)
        if risk_level is not None:
            query = query.where(HealthReport.risk_level == risk_level)
        if stress_level is not None:
            query = query.where(HealthReport.stress_level == stress_level)
        if search:
            pattern = f"%{search}%"
            query = query.join(Driver, Driver.id == HealthReport.driver_id).where(or_(
                Driver.name.ilike(pattern),
                Driver.driver_code.ilike(pattern),
            ))
        return query.order_by(HealthReport.report_date.desc(), HealthReport.id)

    async def list_reports(self, page: int = 1, limit: int = 15, **filters: Any) -> dict:
        return await paginate(self.db, self._query(**filters), page=page, limit=limit)

    async def window(
        self,
        scroll_offset: float,
        row_height: int,
        visible_rows: int,
        **filters: Any,
    ) -> Tuple[List[HealthReport], VisibleWindow, int]:
        return await fetch_window(self.db, self._query(**filters), scroll_offset, row_height, visible_rows)

    async def create_report(self, data: HealthReportCreate) -> HealthReport:
        if not data.driver_id:
            raise ValidationError("Driver ID is required", field="driver_id")
        driver = await DriverService(self.db).get_driver(data.driver_id)

        risk_level = data.risk_level or assess_risk(
            data.blood_pressure_high,
            data.blood_pressure_low,
            data.heart_rate,
            data.stress_level,
        )
        report = HealthReport(
            driver_id=driver.id,
            report_date=data.report_date or datetime.utcnow(),
            blood_pressure_high=data.blood_pressure_high,
            blood_pressure_low=data.blood_pressure_low,
            heart_rate=data.heart_rate,
            stress_level=data.stress_level,
            risk_level=risk_level,
            notes=data.notes,
        )
        self.db.add(report)
        await self.db.commit()
        await self.db.refresh(report)

        logger.info(f"[Health] Report for {driver.driver_code}: {risk_level.value}")
        return report

    async def latest_for_driver(self, driver_id: str) -> Optional[HealthReport]:
        result = await self.db.execute(self._query(driver_id=driver_id).limit(1))
        return result.scalar_one_or_none()

    async def driver_report(self, driver_id: str) -> Dict[str, Any]:
        """Driver summary, their latest report and recommendations"""
        driver = await DriverService(self.db).get_driver(driver_id)
        latest = await self.latest_for_driver(driver.id)
        return {
            "driver": driver,
            "weight": driver.weight,
            "height": driver.height,
            "latest_report": latest,
            "recommendations": recommendations_for(driver, latest),
        }

    async def _count(self, *criteria) -> int:
        return await count_rows(self.db, select(HealthReport.id).where(*criteria))

    async def today_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        start, end = day_bounds(now)
        today = (HealthReport.report_date >= start, HealthReport.report_date < end)
        return {
            "date": start.date().isoformat(),
            "today_reports": await self._count(*today),
            "critical_cases": await self._count(*today, is_critical_clause()),
            "critical_cases_overall": await self._count(is_critical_clause()),
            "overall_total_reports": await self._count(),
        }

    async def counts(self, now: Optional[datetime] = None) -> Dict[str, int]:
        start, end = day_bounds(now)
        return {
            "total": await self._count(),
            "today_by_created_at": await self._count(HealthReport.created_at >= start, HealthReport.created_at < end),
            "today_by_report_date": await self._count(HealthReport.report_date >= start, HealthReport.report_date < end),
        }

    async def check_dates(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Which dates the stored reports fall on, relative to today"""
        now = now or datetime.utcnow()
        start, end = day_bounds(now)
        counts = await self.counts(now)
        recent = await self.db.execute(
            select(HealthReport.report_date, HealthReport.created_at)
            .order_by(HealthReport.report_date.desc())
            .limit(RECENT_DATES_LIMIT)
        )
        return {
            "current_date": now.isoformat(),
            "today_start": start.isoformat(),
            "today_end": end.isoformat(),
            "total": counts["total"],
            "count_by_report_date": counts["today_by_report_date"],
            "count_by_created_at": counts["today_by_created_at"],
            "recent": [
                {"report_date": report_date.isoformat(), "created_at": created_at.isoformat()}
                for report_date, created_at in recent.all()
            ],
        }
