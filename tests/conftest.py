"""
Shared fixtures for Budgetly tests.

No real external calls: AI, SMTP and clocks are faked. Repositories are
either AsyncMock fakes (unit tests) or the in-memory backend (flows).
"""

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock

import pytest

from budgetly.models.entities import Bill, Password, Planning, User
from budgetly.models.value_objects import (
    Bool,
    DateEpoch,
    Description,
    Email,
    Goal,
    Id,
    InstallmentsNumber,
    MoneyValue,
    Name,
    PasswordHash,
    Plan,
)
from budgetly.services.storage import (
    InMemoryBillCommandRepository,
    InMemoryBillQueryRepository,
    InMemoryDatabase,
    InMemoryPasswordCommandRepository,
    InMemoryPasswordQueryRepository,
    InMemoryPlanningCommandRepository,
    InMemoryPlanningQueryRepository,
    InMemoryUserCommandRepository,
    InMemoryUserQueryRepository,
)


USER_ID = "2acee5ff-d55b-47a8-9caf-bece2ba102db"
OTHER_USER_ID = "6f1c2e1a-8b7d-4c3e-9a1b-2d3c4e5f6a7b"
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_user(
    user_id: str = USER_ID,
    email: str = "jane@example.com",
    salary: Optional[float] = 2500.63,
    **overrides,
) -> User:
    data = dict(
        id=Id(user_id),
        name=Name("Jane Doe"),
        birthdate=DateEpoch("1990-05-20T00:00:00.000Z"),
        email=Email(email),
        created_at=DateEpoch("2024-01-01T00:00:00.000Z"),
        salary=MoneyValue(salary) if salary else None,
    )
    data.update(overrides)
    return User(**data)


def make_bill(
    name: str = "Rent",
    value: float = 1500.0,
    installments: Optional[int] = None,
    created_at: str = "2024-06-01T10:00:00.000Z",
    user_id: str = USER_ID,
    **overrides,
) -> Bill:
    data = dict(
        id=Id.generate(),
        user_id=Id(user_id),
        name=Name(name),
        value=MoneyValue(value),
        created_at=DateEpoch(created_at),
        installments_number=InstallmentsNumber(installments) if installments else None,
    )
    data.update(overrides)
    return Bill(**data)


def make_planning(user_id: str = USER_ID, **overrides) -> Planning:
    data = dict(
        id=Id.generate(),
        user_id=Id(user_id),
        name=Name("Emergency fund"),
        goal=Goal("Save six months of expenses"),
        goal_value=MoneyValue(15000),
        plan=Plan("Put aside 20% of the salary every month."),
        created_at=DateEpoch("2024-06-01T00:00:00.000Z"),
        description=Description("Safety net"),
    )
    data.update(overrides)
    return Planning(**data)


def make_password_record(
    user_id: str = USER_ID,
    hashed: str = "$2b$04$hash",
    active: bool = True,
) -> Password:
    return Password(
        id=Id.generate(),
        user_id=Id(user_id),
        password=PasswordHash(hashed),
        active=Bool(active),
        created_at=DateEpoch("2024-01-01T00:00:00.000Z"),
    )


@pytest.fixture
def user() -> User:
    return make_user()


@pytest.fixture
def audit_logger() -> AsyncMock:
    """Stands in for AuditLogger; every log_* call is an awaitable no-op."""
    return AsyncMock()


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def repos(database):
    """All in-memory repositories over one shared database."""

    class Repos:
        user_command = InMemoryUserCommandRepository(database)
        user_query = InMemoryUserQueryRepository(database)
        bill_command = InMemoryBillCommandRepository(database)
        bill_query = InMemoryBillQueryRepository(database)
        planning_command = InMemoryPlanningCommandRepository(database)
        planning_query = InMemoryPlanningQueryRepository(database)
        password_command = InMemoryPasswordCommandRepository(database)
        password_query = InMemoryPasswordQueryRepository(database)

    return Repos
