"""
Unit Tests for AttendanceService
"""
import pytest
from datetime import date, datetime, timedelta

from safedrive.core.exceptions import (
    AttendanceRecordNotFoundError,
    AttendanceStateError,
    DriverNotFoundError,
    DuplicateResourceError,
    ValidationError,
)
from safedrive.core.logging_config import driver_id_var, request_context
from safedrive.models import AttendanceStatus
from safedrive.schemas.attendance import AttendanceCheck
from safedrive.services.attendance_service import AttendanceService, date_range, hours_between


class TestHelpers:

    def test_date_range_defaults_to_today(self):
        today = date(2024, 3, 10)

        assert date_range(None, None, today) == (today, today)

    def test_single_date_means_that_day(self):
        day = date(2024, 3, 1)

        assert date_range(day, None) == (day, day)
        assert date_range(None, day) == (day, day)

    def test_explicit_range(self):
        assert date_range(date(2024, 3, 1), date(2024, 3, 5)) == (date(2024, 3, 1), date(2024, 3, 5))

    def test_hours_between(self):
        assert hours_between(datetime(2024, 3, 10, 8, 0), datetime(2024, 3, 10, 16, 30)) == 8.5


class TestCheckIn:

    @pytest.mark.asyncio
    async def test_creates_present_record(self, db_session, make_driver):
        driver = await make_driver()
        now = datetime(2024, 3, 10, 8, 15)

        record = await AttendanceService(db_session).check_in(
            AttendanceCheck(driver_id=driver.id, location="Depot 4"), now=now
        )

        assert record.status == AttendanceStatus.PRESENT
        assert record.date == date(2024, 3, 10)
        assert record.check_in_time == now
        assert record.location == "Depot 4"
        assert record.driver.id == driver.id

    @pytest.mark.asyncio
    async def test_second_check_in_same_day_rejected(self, db_session, make_driver):
        driver = await make_driver()
        service = AttendanceService(db_session)
        now = datetime(2024, 3, 10, 8, 15)
        await service.check_in(AttendanceCheck(driver_id=driver.id), now=now)

        with pytest.raises(DuplicateResourceError) as exc_info:
            await service.check_in(AttendanceCheck(driver_id=driver.id), now=now + timedelta(hours=1))

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Driver has already checked in today"

    @pytest.mark.asyncio
    async def test_fills_record_without_check_in(self, db_session, make_driver, make_attendance):
        driver = await make_driver()
        now = datetime(2024, 3, 10, 9, 0)
        absent = await make_attendance(
            driver, date=now.date(), check_in_time=None, status=AttendanceStatus.ABSENT
        )

        record = await AttendanceService(db_session).check_in(AttendanceCheck(driver_id=driver.id), now=now)

        assert record.id == absent.id
        assert record.status == AttendanceStatus.PRESENT

    @pytest.mark.asyncio
    async def test_next_day_is_a_new_record(self, db_session, make_driver):
        driver = await make_driver()
        service = AttendanceService(db_session)
        now = datetime(2024, 3, 10, 8, 0)

        first = await service.check_in(AttendanceCheck(driver_id=driver.id), now=now)
        second = await service.check_in(AttendanceCheck(driver_id=driver.id), now=now + timedelta(days=1))

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_missing_driver_id(self, db_session):
        with pytest.raises(ValidationError):
            await AttendanceService(db_session).check_in(AttendanceCheck())

    @pytest.mark.asyncio
    async def test_unknown_driver(self, db_session):
        with pytest.raises(DriverNotFoundError):
            await AttendanceService(db_session).check_in(AttendanceCheck(driver_id="missing"))

    @pytest.mark.asyncio
    async def test_driver_id_tagged_on_log_context(self, db_session, make_driver):
        driver = await make_driver()

        with request_context("req-1"):
            await AttendanceService(db_session).check_in(AttendanceCheck(driver_id=driver.id))
            assert driver_id_var.get() == driver.id

        assert driver_id_var.get() == ""


class TestCheckOut:

    @pytest.mark.asyncio
    async def test_records_working_hours(self, db_session, make_driver):
        driver = await make_driver()
        service = AttendanceService(db_session)
        started = datetime(2024, 3, 10, 8, 0)
        await service.check_in(AttendanceCheck(driver_id=driver.id), now=started)

        record = await service.check_out(
            AttendanceCheck(driver_id=driver.id), now=started + timedelta(hours=9, minutes=15)
        )

        assert record.check_out_time == datetime(2024, 3, 10, 17, 15)
        assert record.working_hours == 9.25

    @pytest.mark.asyncio
    async def test_without_record(self, db_session, make_driver):
        driver = await make_driver()

        with pytest.raises(AttendanceRecordNotFoundError) as exc_info:
            await AttendanceService(db_session).check_out(AttendanceCheck(driver_id=driver.id))

        assert exc_info.value.message == "No check-in record found for today"

    @pytest.mark.asyncio
    async def test_record_without_check_in(self, db_session, make_driver, make_attendance):
        driver = await make_driver()
        await make_attendance(driver, check_in_time=None, status=AttendanceStatus.ABSENT)

        with pytest.raises(AttendanceStateError) as exc_info:
            await AttendanceService(db_session).check_out(AttendanceCheck(driver_id=driver.id))

        assert exc_info.value.message == "Driver has not checked in yet"

    @pytest.mark.asyncio
    async def test_second_check_out_rejected(self, db_session, make_driver):
        driver = await make_driver()
        service = AttendanceService(db_session)
        now = datetime(2024, 3, 10, 8, 0)
        await service.check_in(AttendanceCheck(driver_id=driver.id), now=now)
        await service.check_out(AttendanceCheck(driver_id=driver.id), now=now + timedelta(hours=8))

        with pytest.raises(AttendanceStateError) as exc_info:
            await service.check_out(AttendanceCheck(driver_id=driver.id), now=now + timedelta(hours=9))

        assert exc_info.value.message == "Driver has already checked out today"


class TestListRecords:

    @pytest.mark.asyncio
    async def test_defaults_to_today(self, db_session, make_driver, make_attendance):
        driver = await make_driver()
        today = datetime.utcnow().date()
        await make_attendance(driver)
        await make_attendance(driver, date=today - timedelta(days=1))

        result = await AttendanceService(db_session).list_records()

        assert result["total"] == 1
        assert result["items"][0].date == today

    @pytest.mark.asyncio
    async def test_date_range_and_status(self, db_session, make_driver, make_attendance):
        driver = await make_driver()
        base = date(2024, 3, 10)
        for offset in range(5):
            await make_attendance(
                driver,
                date=base - timedelta(days=offset),
                status=AttendanceStatus.LATE if offset % 2 else AttendanceStatus.PRESENT,
            )

        service = AttendanceService(db_session)
        week = await service.list_records(start_date=base - timedelta(days=3), end_date=base)
        late = await service.list_records(
            start_date=base - timedelta(days=4), end_date=base, status=AttendanceStatus.LATE
        )

        assert [r.date for r in week["items"]] == [base - timedelta(days=n) for n in range(4)]
        assert late["total"] == 2

    @pytest.mark.asyncio
    async def test_driver_filter(self, db_session, make_driver, make_attendance):
        first = await make_driver()
        second = await make_driver()
        await make_attendance(first)
        await make_attendance(second)

        result = await AttendanceService(db_session).list_records(driver_id=second.id)

        assert [r.driver_id for r in result["items"]] == [second.id]

    @pytest.mark.asyncio
    async def test_window(self, db_session, make_driver, make_attendance):
        for _ in range(6):
            await make_attendance(await make_driver())

        rows, window, total = await AttendanceService(db_session).window(0, 40, 2)

        assert total == 6
        assert len(rows) == 3
        assert window.start_index == 0
