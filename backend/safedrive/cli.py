"""
SafeDrive admin CLI

Usage:
    safedrive serve                         # Run the dashboard with uvicorn
    safedrive init-db                       # Create tables
    safedrive create-user EMAIL NAME        # Add an operator account
    safedrive seed --drivers 25             # Demo operators, drivers, alerts and reports
"""

import argparse
import asyncio
import getpass
import sys
from datetime import datetime, timedelta
from typing import List, Optional

from faker import Faker
from rich.console import Console
from rich.table import Table
from sqlalchemy import delete, select

from safedrive.core.config import settings
from safedrive.core.database import AsyncSessionLocal, init_db, close_db
from safedrive.core.exceptions import DuplicateResourceError
from safedrive.core.security import get_password_hash
from safedrive.models import (
    AttendanceRecord,
    AttendanceStatus,
    Driver,
    Gender,
    HealthReport,
    Notification,
    StressLevel,
    SystemAlert,
    User,
    UserRole,
)
from safedrive.services.alert_service import AlertService
from safedrive.services.driver_service import format_driver_code
from safedrive.services.health_report_service import assess_risk

console = Console()

DEMO_PASSWORD = "password123"
DEMO_USERS = [
    ("admin@driverhealthsystem.com", "System Administrator", UserRole.ADMIN),
    ("manager@driverhealthsystem.com", "Fleet Manager", UserRole.MANAGER),
    ("supervisor@driverhealthsystem.com", "Health Supervisor", UserRole.SUPERVISOR),
]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="safedrive",
        description="SafeDrive - driver health and safety monitoring dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument("--host", default=settings.SERVER_HOST)
    serve_parser.add_argument("--port", type=int, default=settings.SERVER_PORT)
    serve_parser.add_argument("--reload", action="store_true", default=False)

    subparsers.add_parser("init-db", help="Create database tables")

    user_parser = subparsers.add_parser("create-user", help="Create an operator account")
    user_parser.add_argument("email")
    user_parser.add_argument("name")
    user_parser.add_argument(
        "--role",
        choices=[r.value for r in UserRole],
        default=UserRole.SUPERVISOR.value,
    )
    user_parser.add_argument("--password", help="Prompted for when omitted")

    seed_parser = subparsers.add_parser("seed", help="Replace data with demo operators, drivers and alerts")
    seed_parser.add_argument("--drivers", type=int, default=25)
    seed_parser.add_argument("--seed", type=int, default=None, help="Faker seed for repeatable data")

    return parser


async def create_user(email: str, name: str, role: str, password: str) -> User:
    await init_db()
    async with AsyncSessionLocal() as db:
        existing = await db.execute(select(User).where(User.email == email.lower()))
        if existing.scalar_one_or_none():
            raise DuplicateResourceError(f"User {email} already exists", field="email")

        user = User(
            email=email.lower(),
            name=name,
            role=UserRole(role),
            hashed_password=get_password_hash(password),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


def _fake_driver(fake: Faker, number: int) -> Driver:
    gender = fake.random_element([Gender.MALE, Gender.FEMALE, Gender.OTHER])
    if gender == Gender.MALE:
        first_name = fake.first_name_male()
    elif gender == Gender.FEMALE:
        first_name = fake.first_name_female()
    else:
        first_name = fake.first_name()
    last_name = fake.last_name()
    date_of_birth = fake.date_of_birth(minimum_age=25, maximum_age=65)

    return Driver(
        driver_code=format_driver_code(number),
        name=f"{first_name} {last_name}",
        email=f"{first_name}.{last_name}@{fake.free_email_domain()}".lower(),
        phone=fake.phone_number(),
        age=datetime.utcnow().year - date_of_birth.year,
        gender=gender,
        address=fake.address().replace("\n", ", "),
        date_of_birth=datetime.combine(date_of_birth, datetime.min.time()),
        weight=round(fake.pyfloat(min_value=50, max_value=120), 1),
        height=round(fake.pyfloat(min_value=150, max_value=200), 1),
    )


def _fake_health_report(fake: Faker, driver: Driver) -> HealthReport:
    high = fake.random_int(min=100, max=180)
    low = fake.random_int(min=60, max=110)
    heart_rate = fake.random_int(min=50, max=120)
    stress = fake.random_element(list(StressLevel))
    return HealthReport(
        driver_id=driver.id,
        report_date=fake.date_time_between(start_date="-90d", end_date="now"),
        blood_pressure_high=high,
        blood_pressure_low=low,
        heart_rate=heart_rate,
        stress_level=stress,
        risk_level=assess_risk(high, low, heart_rate, stress),
        notes=fake.sentence() if fake.boolean(chance_of_getting_true=30) else None,
    )


def _fake_attendance(fake: Faker, driver: Driver) -> AttendanceRecord:
    """Today's record, checked in this morning"""
    now = datetime.utcnow()
    check_in = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(
        minutes=fake.random_int(min=0, max=max(0, now.hour * 60 + now.minute))
    )
    return AttendanceRecord(
        driver_id=driver.id,
        date=now.date(),
        check_in_time=check_in,
        status=AttendanceStatus.PRESENT,
        location="Depot",
    )


async def seed(driver_count: int, faker_seed: Optional[int] = None) -> List[Driver]:
    fake = Faker()
    if faker_seed is not None:
        Faker.seed(faker_seed)

    await init_db()
    async with AsyncSessionLocal() as db:
        console.print("[dim]Clearing existing data...[/dim]")
        for model in (Notification, SystemAlert, HealthReport, AttendanceRecord, Driver, User):
            await db.execute(delete(model))
        await db.commit()

        hashed = get_password_hash(DEMO_PASSWORD)
        for email, name, role in DEMO_USERS:
            db.add(User(email=email, name=name, role=role, hashed_password=hashed))

        drivers = [_fake_driver(fake, number) for number in range(1, driver_count + 1)]
        db.add_all(drivers)
        await db.commit()

        alerts = AlertService(db)
        for driver in drivers[: min(5, len(drivers))]:
            await alerts.check_and_create_alerts(
                driver.id,
                driver.name,
                {
                    "heartRate": fake.random_int(min=101, max=140),
                    "oxygenSaturation": fake.random_int(min=82, max=89),
                },
            )
        await alerts.create_test_alerts("all")

        for driver in drivers:
            db.add_all(_fake_health_report(fake, driver) for _ in range(fake.random_int(min=3, max=8)))
            if fake.boolean(chance_of_getting_true=80):
                db.add(_fake_attendance(fake, driver))
        await db.commit()

        return drivers


def _print_users() -> None:
    table = Table(title="Demo accounts")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Password")
    for email, _, role in DEMO_USERS:
        table.add_row(email, role.value, DEMO_PASSWORD)
    console.print(table)


async def _run_async(coro):
    try:
        return await coro
    finally:
        await close_db()


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        import uvicorn
        uvicorn.run("safedrive.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "init-db":
        asyncio.run(_run_async(init_db()))
        console.print(f"[green]Tables ready[/green] ({settings.DATABASE_URL})")
        return 0

    if args.command == "create-user":
        password = args.password or getpass.getpass("Password: ")
        if not password:
            console.print("[red]A password is required[/red]")
            return 1
        try:
            user = asyncio.run(_run_async(create_user(args.email, args.name, args.role, password)))
        except DuplicateResourceError as e:
            console.print(f"[red]{e.message}[/red]")
            return 1
        console.print(f"[green]Created {user.role.value} {user.email}[/green]")
        return 0

    if args.command == "seed":
        drivers = asyncio.run(_run_async(seed(args.drivers, args.seed)))
        console.print(f"[green]Seeded {len(drivers)} drivers and demo alerts[/green]")
        _print_users()
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
