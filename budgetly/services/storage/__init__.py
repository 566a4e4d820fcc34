"""
Storage Services Package

Provides repository interfaces, record adapters and an in-memory backend.
Use cases only ever see the interfaces, so the backend is swappable.
"""

from budgetly.services.storage.interface import (
    AuditStorageInterface,
    BillCommandRepository,
    BillQueryRepository,
    CommandRepository,
    Filter,
    PasswordCommandRepository,
    PasswordQueryRepository,
    PlanningCommandRepository,
    PlanningQueryRepository,
    QueryRepository,
    UserCommandRepository,
    UserQueryRepository,
)
from budgetly.services.storage.adapters import (
    BillAdapter,
    PasswordAdapter,
    PlanningAdapter,
    UserAdapter,
)
from budgetly.services.storage.memory import (
    InMemoryAuditStorage,
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

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BillCommandRepository",
    "BillQueryRepository",
    "CommandRepository",
    "Filter",
    "PasswordCommandRepository",
    "PasswordQueryRepository",
    "PlanningCommandRepository",
    "PlanningQueryRepository",
    "QueryRepository",
    "UserCommandRepository",
    "UserQueryRepository",
    # Adapters
    "BillAdapter",
    "PasswordAdapter",
    "PlanningAdapter",
    "UserAdapter",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBillCommandRepository",
    "InMemoryBillQueryRepository",
    "InMemoryDatabase",
    "InMemoryPasswordCommandRepository",
    "InMemoryPasswordQueryRepository",
    "InMemoryPlanningCommandRepository",
    "InMemoryPlanningQueryRepository",
    "InMemoryUserCommandRepository",
    "InMemoryUserQueryRepository",
]
