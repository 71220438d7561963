"""Integration test fixtures backed by a per-test SQLite database."""

from collections.abc import AsyncGenerator
from datetime import date, datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from payroll_admin.api.app import create_app
from payroll_admin.api.dependencies import get_db_session
from payroll_admin.calculators.engine import PayrollEngine
from payroll_admin.database import make_session_factory
from payroll_admin.models import (
    AllowanceType,
    Attendance,
    Base,
    DeductionType,
    Employee,
    PayrollPeriod,
    Setting,
)

TEST_ENGINE_VERSION = "test-1.0.0"


@pytest.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed database so several sessions can share it."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(db_engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def payroll_engine() -> PayrollEngine:
    return PayrollEngine(engine_version=TEST_ENGINE_VERSION)


@pytest.fixture
async def catalog(session: AsyncSession) -> dict[str, object]:
    """Deduction and allowance types plus policy settings."""
    income_tax = DeductionType(
        name="Income Tax",
        description="Income tax withholding",
        is_percentage=True,
        default_value=Decimal("15"),
        is_required=True,
    )
    health = DeductionType(
        name="Health Insurance",
        description="Health insurance premium",
        is_percentage=True,
        default_value=Decimal("3"),
        is_required=False,
    )
    transport = AllowanceType(name="Transportation", is_taxable=False)
    bonus = AllowanceType(name="Performance Bonus", is_taxable=True)
    session.add_all(
        [
            income_tax,
            health,
            transport,
            bonus,
            Setting(key="tax_rate", value="0.15"),
            Setting(key="overtime_multiplier", value="1.5"),
            Setting(key="standard_work_hours", value="160"),
        ]
    )
    await session.commit()
    return {
        "income_tax": income_tax,
        "health": health,
        "transport": transport,
        "bonus": bonus,
    }


def make_employee(code: str, basic_salary: str = "0", hourly_rate: str | None = None) -> Employee:
    return Employee(
        employee_code=code,
        first_name="Test",
        last_name=code,
        email=f"{code.lower()}@example.com",
        position="Engineer",
        department="Engineering",
        date_hired=date(2020, 1, 1),
        basic_salary=Decimal(basic_salary),
        hourly_rate=Decimal(hourly_rate) if hourly_rate is not None else None,
        status="active",
    )


@pytest.fixture
async def salaried_employee(session: AsyncSession) -> Employee:
    employee = make_employee("EMP001", basic_salary="5000")
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
async def hourly_employee(session: AsyncSession) -> Employee:
    employee = make_employee("EMP002", hourly_rate="20")
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
async def period(session: AsyncSession) -> PayrollPeriod:
    """January 2024 in draft."""
    period = PayrollPeriod(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), status="draft")
    session.add(period)
    await session.commit()
    return period


async def add_attendance(
    session: AsyncSession, employee_id: int, day: date, hours: int, status: str = "present"
) -> Attendance:
    row = Attendance(
        employee_id=employee_id,
        work_date=day,
        time_in=datetime(day.year, day.month, day.day, 9, 0),
        time_out=datetime(day.year, day.month, day.day, 9 + hours, 0),
        status=status,
    )
    session.add(row)
    await session.commit()
    return row


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client bound to the test database."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
