"""
Unit Tests for HealthReportService
"""
import pytest
from datetime import datetime, timedelta

from safedrive.core.exceptions import DriverNotFoundError, ValidationError
from safedrive.models import RiskLevel
from safedrive.models.health_report import StressLevel
from safedrive.schemas.health_report import HealthReportCreate
from safedrive.services.health_report_service import (
    HealthReportService,
    assess_risk,
    body_mass_index,
    day_bounds,
    recommendations_for,
)


class TestAssessRisk:

    @pytest.mark.parametrize("high,low,heart_rate,stress,expected", [
        (165, 85, 80, None, RiskLevel.CRITICAL),
        (125, 101, 70, None, RiskLevel.CRITICAL),
        (118, 65, 111, None, RiskLevel.CRITICAL),
        (110, 65, 70, StressLevel.VERY_HIGH, RiskLevel.CRITICAL),
        (142, 85, 80, None, RiskLevel.HIGH),
        (110, 65, 70, StressLevel.HIGH, RiskLevel.HIGH),
        (132, 75, 80, None, RiskLevel.MEDIUM),
        (110, 65, 91, None, RiskLevel.MEDIUM),
        (110, 65, 70, StressLevel.MILD, RiskLevel.MEDIUM),
        (121, 65, 70, None, RiskLevel.LOW),
        (115, 72, 70, StressLevel.NORMAL, RiskLevel.LOW),
        (115, 65, 80, StressLevel.NORMAL, RiskLevel.NORMAL),
    ])
    def test_bands(self, high, low, heart_rate, stress, expected):
        assert assess_risk(high, low, heart_rate, stress) == expected

    def test_heart_rate_boundary_is_exclusive(self):
        assert assess_risk(110, 60, 100) == RiskLevel.MEDIUM
        assert assess_risk(110, 60, 101) == RiskLevel.HIGH

    @pytest.mark.parametrize("high,low,heart_rate", [
        (None, 80, 70),
        (190, None, 70),
        (190, 120, None),
    ])
    def test_incomplete_vitals_stay_normal(self, high, low, heart_rate):
        assert assess_risk(high, low, heart_rate, StressLevel.VERY_HIGH) == RiskLevel.NORMAL


class TestRecommendations:

    @pytest.mark.asyncio
    async def test_no_report_asks_for_baseline(self, make_driver):
        driver = await make_driver()

        assert recommendations_for(driver, None) == [
            "Schedule a comprehensive health checkup to establish baseline metrics."
        ]

    @pytest.mark.asyncio
    async def test_high_blood_pressure_and_stress(self, make_driver, make_health_report):
        driver = await make_driver(age=35)
        report = await make_health_report(
            driver, blood_pressure_high=150, blood_pressure_low=95, stress_level=StressLevel.HIGH
        )

        advice = recommendations_for(driver, report)

        assert advice[0].startswith("High blood pressure detected")
        assert "Take regular breaks during long driving periods." in advice
        assert len(advice) == 6

    @pytest.mark.asyncio
    async def test_low_heart_rate_only_flagged_over_forty(self, make_driver, make_health_report):
        young = await make_driver(age=30)
        older = await make_driver(age=48)
        young_report = await make_health_report(young, heart_rate=52)
        older_report = await make_health_report(older, heart_rate=52)

        assert not any("Low heart rate" in a for a in recommendations_for(young, young_report))
        assert "Low heart rate detected. Monitor for symptoms of dizziness or fatigue." in \
            recommendations_for(older, older_report)

    @pytest.mark.asyncio
    async def test_healthy_driver_gets_general_advice_then_weight(self, make_driver, make_health_report):
        driver = await make_driver(age=40, weight=95.0, height=175.0)
        report = await make_health_report(driver)

        advice = recommendations_for(driver, report)

        assert advice == [
            "Maintain current healthy habits and continue regular health monitoring.",
            "Stay hydrated and take regular breaks during long driving periods.",
            "Consider weight management program to improve overall health and driving comfort.",
        ]

    @pytest.mark.asyncio
    async def test_senior_driver(self, make_driver, make_health_report):
        driver = await make_driver(age=58)
        report = await make_health_report(driver)

        advice = recommendations_for(driver, report)

        assert advice == [
            "Regular vision and hearing tests recommended for drivers over 55.",
            "Consider annual medical clearance for continued driving duties.",
        ]

    def test_body_mass_index(self):
        assert round(body_mass_index(80, 180), 1) == 24.7
        assert body_mass_index(None, 180) is None
        assert body_mass_index(80, 0) is None


class TestCreateReport:

    @pytest.mark.asyncio
    async def test_risk_derived_from_readings(self, db_session, make_driver):
        driver = await make_driver()

        report = await HealthReportService(db_session).create_report(HealthReportCreate(
            driver_id=driver.id,
            blood_pressure_high=145,
            blood_pressure_low=85,
            heart_rate=78,
        ))

        assert report.risk_level == RiskLevel.HIGH
        assert report.driver.driver_code == driver.driver_code

    @pytest.mark.asyncio
    async def test_explicit_risk_level_kept(self, db_session, make_driver):
        driver = await make_driver()

        report = await HealthReportService(db_session).create_report(HealthReportCreate(
            driver_id=driver.id,
            blood_pressure_high=180,
            blood_pressure_low=110,
            heart_rate=120,
            risk_level=RiskLevel.LOW,
        ))

        assert report.risk_level == RiskLevel.LOW

    @pytest.mark.asyncio
    async def test_missing_driver_id(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await HealthReportService(db_session).create_report(HealthReportCreate(heart_rate=70))

        assert exc_info.value.details == {"field": "driver_id"}

    @pytest.mark.asyncio
    async def test_unknown_driver(self, db_session):
        with pytest.raises(DriverNotFoundError):
            await HealthReportService(db_session).create_report(HealthReportCreate(driver_id="missing"))


class TestListAndWindow:

    @pytest.mark.asyncio
    async def test_latest_report_date_first(self, db_session, make_driver, make_health_report):
        driver = await make_driver()
        now = datetime.utcnow()
        for days in (3, 1, 2):
            await make_health_report(driver, report_date=now - timedelta(days=days), notes=f"{days}d")

        result = await HealthReportService(db_session).list_reports()

        assert [r.notes for r in result["items"]] == ["1d", "2d", "3d"]
        assert result["limit"] == 15

    @pytest.mark.asyncio
    async def test_filters(self, db_session, make_driver, make_health_report):
        ravi = await make_driver(name="Ravi Kumar")
        asha = await make_driver(name="Asha Rao")
        await make_health_report(ravi, risk_level=RiskLevel.CRITICAL)
        await make_health_report(asha, stress_level=StressLevel.MILD)

        service = HealthReportService(db_session)

        critical = await service.list_reports(risk_level=RiskLevel.CRITICAL)
        mild = await service.list_reports(stress_level=StressLevel.MILD)
        by_name = await service.list_reports(search="asha")

        assert [r.driver_id for r in critical["items"]] == [ravi.id]
        assert [r.driver_id for r in mild["items"]] == [asha.id]
        assert [r.driver_id for r in by_name["items"]] == [asha.id]

    @pytest.mark.asyncio
    async def test_window_loads_visible_slice(self, db_session, make_driver, make_health_report):
        driver = await make_driver()
        now = datetime.utcnow()
        for i in range(12):
            await make_health_report(driver, report_date=now - timedelta(hours=i), heart_rate=60 + i)

        rows, window, total = await HealthReportService(db_session).window(85, 40, 3)

        assert total == 12
        assert (window.start_index, window.end_index) == (2, 6)
        assert [r.heart_rate for r in rows] == [62, 63, 64, 65]


class TestDailyCounts:

    @pytest.mark.asyncio
    async def test_today_stats(self, db_session, make_driver, make_health_report):
        now = datetime(2024, 3, 10, 15, 30)
        driver = await make_driver()
        await make_health_report(driver, report_date=now.replace(hour=8))
        await make_health_report(driver, report_date=now.replace(hour=9), heart_rate=104)
        await make_health_report(driver, report_date=now.replace(hour=10), risk_level=RiskLevel.HIGH)
        await make_health_report(driver, report_date=now - timedelta(days=1), heart_rate=55)
        await make_health_report(driver, report_date=now - timedelta(days=2))

        stats = await HealthReportService(db_session).today_stats(now)

        assert stats == {
            "date": "2024-03-10",
            "today_reports": 3,
            "critical_cases": 2,
            "critical_cases_overall": 3,
            "overall_total_reports": 5,
        }

    @pytest.mark.asyncio
    async def test_counts_by_report_and_created_date(self, db_session, make_driver, make_health_report):
        now = datetime(2024, 3, 10, 12, 0)
        driver = await make_driver()
        await make_health_report(driver, report_date=now, created_at=now - timedelta(days=1))
        await make_health_report(driver, report_date=now - timedelta(days=5), created_at=now)
        await make_health_report(driver, report_date=now, created_at=now)

        counts = await HealthReportService(db_session).counts(now)

        assert counts == {"total": 3, "today_by_created_at": 2, "today_by_report_date": 2}

    @pytest.mark.asyncio
    async def test_check_dates(self, db_session, make_driver, make_health_report):
        now = datetime(2024, 3, 10, 12, 0)
        driver = await make_driver()
        for days in range(12):
            await make_health_report(driver, report_date=now - timedelta(days=days), created_at=now)

        dates = await HealthReportService(db_session).check_dates(now)

        assert dates["today_start"] == "2024-03-10T00:00:00"
        assert dates["today_end"] == "2024-03-11T00:00:00"
        assert dates["total"] == 12
        assert dates["count_by_report_date"] == 1
        assert dates["count_by_created_at"] == 12
        assert len(dates["recent"]) == 10
        assert dates["recent"][0]["report_date"] == "2024-03-10T12:00:00"

    def test_day_bounds(self):
        start, end = day_bounds(datetime(2024, 3, 10, 23, 59, 59))

        assert start == datetime(2024, 3, 10)
        assert end == datetime(2024, 3, 11)


class TestDriverReport:

    @pytest.mark.asyncio
    async def test_latest_report_and_advice(self, db_session, make_driver, make_health_report):
        driver = await make_driver(age=45)
        now = datetime.utcnow()
        await make_health_report(driver, report_date=now - timedelta(days=10), heart_rate=120)
        latest = await make_health_report(driver, report_date=now, heart_rate=70)

        report = await HealthReportService(db_session).driver_report(driver.id)

        assert report["driver"].id == driver.id
        assert report["latest_report"].id == latest.id
        assert report["recommendations"][0].startswith("Maintain current healthy habits")

    @pytest.mark.asyncio
    async def test_driver_without_reports(self, db_session, make_driver):
        driver = await make_driver()

        report = await HealthReportService(db_session).driver_report(driver.id)

        assert report["latest_report"] is None
        assert len(report["recommendations"]) == 1

    @pytest.mark.asyncio
    async def test_unknown_driver(self, db_session):
        with pytest.raises(DriverNotFoundError):
            await HealthReportService(db_session).driver_report("missing")
