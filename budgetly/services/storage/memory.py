"""
In-Memory Storage Implementation

DESIGN DECISION: A dict-backed backend ships alongside the interfaces so
the whole system runs end-to-end without a database (local development,
integration tests).

Records are kept exactly as the adapters project them (`to_model`), and
every read goes back through `to_entity`. That keeps this backend honest:
anything that would not survive a real persistence round trip fails here
as well.

TRADEOFFS:
- Not durable, not shared between processes
- Filtering is a linear scan (fine for tests and demos)
"""

import asyncio
from typing import Any, Optional
from uuid import UUID

from pydantic import RootModel

from budgetly.exceptions import DatabaseException
from budgetly.models.audit import AuditEvent
from budgetly.models.dtos import UserDTO
from budgetly.models.entities import Bill, Password, Planning, User
from budgetly.models.value_objects import DateEpoch, Email, Id
from budgetly.services.storage.adapters import (
    BillAdapter,
    PasswordAdapter,
    PlanningAdapter,
    UserAdapter,
)
from budgetly.services.storage.interface import (
    AuditStorageInterface,
    BillCommandRepository,
    BillQueryRepository,
    Filter,
    PasswordCommandRepository,
    PasswordQueryRepository,
    PlanningCommandRepository,
    PlanningQueryRepository,
    UserCommandRepository,
    UserQueryRepository,
)


class InMemoryDatabase:
    """
    Shared state for all in-memory repositories.

    One instance plays the role of one database. Tables are dicts keyed by
    record id.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.bills: dict[str, dict] = {}
        self.plannings: dict[str, dict] = {}
        self.passwords: dict[str, dict] = {}
        self.audit_events: list[AuditEvent] = []
        self.lock = asyncio.Lock()

    def table(self, name: str) -> dict[str, dict]:
        return getattr(self, name)


def _normalize(value: Any) -> Any:
    """Bring a filter value to the shape it has inside a stored record."""
    if isinstance(value, DateEpoch):
        return value.to_iso()
    if isinstance(value, RootModel):
        return value.root
    if isinstance(value, UUID):
        return str(value)
    return value


def _matches(record: dict, filter: Optional[Filter]) -> bool:
    if not filter:
        return True
    return all(record.get(key) == _normalize(value) for key, value in filter.items())


# =============================================================================
# SHARED BEHAVIOUR
# =============================================================================

class _InMemoryCommand:
    """create / update / soft_delete / hard_delete over one table."""

    _table: str
    _label: str
    _adapter: Any

    def __init__(self, database: InMemoryDatabase):
        self._db = database

    @property
    def _records(self) -> dict[str, dict]:
        return self._db.table(self._table)

    def _require(self, id: Any) -> dict:
        record = self._records.get(str(id))
        if record is None:
            raise DatabaseException(f"{self._label} not found: {id}")
        return record

    async def create(self, entity):
        record = self._adapter.to_model(entity)
        if record["id"] in self._records:
            raise DatabaseException(f"{self._label} already exists: {record['id']}")
        self._records[record["id"]] = record
        return entity

    async def update(self, dto) -> None:
        record = self._require(dto.id)
        merged = {**record, **self._adapter.to_partial_model(dto)}
        if dto.updated_at is None:
            merged["updated_at"] = DateEpoch.now().to_iso()
        # Validate before replacing the stored record.
        self._load(merged)
        self._records[merged["id"]] = merged

    async def soft_delete(self, id: Id) -> None:
        record = self._require(id)
        self._records[str(id)] = {**record, "deleted_at": DateEpoch.now().to_iso()}

    async def hard_delete(self, id: Id) -> None:
        self._require(id)
        del self._records[str(id)]

    def _load(self, record: dict):
        return self._adapter.to_entity(record)


class _InMemoryQuery:
    """get / find / list over one table."""

    _table: str
    _adapter: Any

    def __init__(self, database: InMemoryDatabase):
        self._db = database

    @property
    def _records(self) -> dict[str, dict]:
        return self._db.table(self._table)

    def _load(self, record: dict):
        return self._adapter.to_entity(record)

    async def get(self, id: Id):
        record = self._records.get(str(id))
        return self._load(record) if record else None

    async def find(self, filter: Filter):
        for record in self._records.values():
            if _matches(record, filter):
                return self._load(record)
        return None

    async def list(self, filter: Optional[Filter] = None):
        return [
            self._load(record)
            for record in self._records.values()
            if _matches(record, filter)
        ]


# =============================================================================
# BILLS
# =============================================================================

class InMemoryBillCommandRepository(_InMemoryCommand, BillCommandRepository):
    _table = "bills"
    _label = "Bill"
    _adapter = BillAdapter

    async def create(self, entity: Bill) -> Bill:
        if str(entity.user_id) not in self._db.users:
            raise DatabaseException(f"User not found: {entity.user_id}")
        return await super().create(entity)


class InMemoryBillQueryRepository(_InMemoryQuery, BillQueryRepository):
    _table = "bills"
    _adapter = BillAdapter


# =============================================================================
# PLANNINGS
# =============================================================================

class InMemoryPlanningCommandRepository(_InMemoryCommand, PlanningCommandRepository):
    _table = "plannings"
    _label = "Planning"
    _adapter = PlanningAdapter

    async def create(self, entity: Planning) -> Planning:
        if str(entity.user_id) not in self._db.users:
            raise DatabaseException(f"User not found: {entity.user_id}")
        return await super().create(entity)


class InMemoryPlanningQueryRepository(_InMemoryQuery, PlanningQueryRepository):
    _table = "plannings"
    _adapter = PlanningAdapter


# =============================================================================
# USERS
# =============================================================================

class InMemoryUserCommandRepository(_InMemoryCommand, UserCommandRepository):
    """
    User rows only. The password record, bills and plannings carried by a
    User entity are owned by their own repositories.
    """

    _table = "users"
    _label = "User"
    _adapter = UserAdapter

    async def create(self, entity: User) -> User:
        email = str(entity.email)
        if any(record["email"] == email for record in self._records.values()):
            raise DatabaseException(f"Email already registered: {email}")
        return await super().create(entity)

    async def update(self, dto: UserDTO) -> None:
        if dto.email is not None:
            email = str(dto.email)
            for record in self._records.values():
                if record["email"] == email and record["id"] != str(dto.id):
                    raise DatabaseException(f"Email already registered: {email}")
        await super().update(dto)

    async def hard_delete(self, id: Id) -> None:
        await super().hard_delete(id)
        # Cascade to everything the user owns.
        for name in ("bills", "plannings", "passwords"):
            table = self._db.table(name)
            for record_id in [key for key, r in table.items() if r["user_id"] == str(id)]:
                del table[record_id]


class InMemoryUserQueryRepository(_InMemoryQuery, UserQueryRepository):
    _table = "users"
    _adapter = UserAdapter

    def _load(self, record: dict) -> User:
        user_id = record["id"]
        owned = {"user_id": user_id}
        password = next(
            (
                r for r in self._db.passwords.values()
                if _matches(r, {**owned, "active": True})
            ),
            None,
        )
        bills = [
            r for r in self._db.bills.values()
            if _matches(r, owned) and not r.get("deleted_at")
        ]
        plannings = [
            r for r in self._db.plannings.values()
            if _matches(r, owned) and not r.get("deleted_at")
        ]
        return UserAdapter.to_entity({
            **record,
            "password": password,
            "bills": bills,
            "plannings": plannings,
        })

    async def get_by_email(self, email: Email) -> Optional[User]:
        return await self.find({"email": str(email)})


# =============================================================================
# PASSWORDS
# =============================================================================

class InMemoryPasswordCommandRepository(PasswordCommandRepository):

    def __init__(self, database: InMemoryDatabase):
        self._db = database

    def _require(self, id: Id) -> dict:
        record = self._db.passwords.get(str(id))
        if record is None:
            raise DatabaseException(f"Password not found: {id}")
        return record

    async def create(self, password: Password) -> Password:
        record = PasswordAdapter.to_model(password)
        if record["id"] in self._db.passwords:
            raise DatabaseException(f"Password already exists: {record['id']}")
        self._db.passwords[record["id"]] = record
        return password

    async def deactivate(self, id: Id) -> None:
        record = self._require(id)
        self._db.passwords[str(id)] = {**record, "active": False}

    async def replace_active(self, old_id: Id, new_password: Password) -> Password:
        async with self._db.lock:
            # Every check happens before the first write.
            old_record = self._require(old_id)
            if not old_record["active"]:
                raise DatabaseException(f"Password is not active: {old_id}")
            new_record = PasswordAdapter.to_model(new_password)
            if new_record["id"] in self._db.passwords:
                raise DatabaseException(f"Password already exists: {new_record['id']}")

            self._db.passwords[old_record["id"]] = {**old_record, "active": False}
            self._db.passwords[new_record["id"]] = new_record
        return new_password


class InMemoryPasswordQueryRepository(_InMemoryQuery, PasswordQueryRepository):
    _table = "passwords"
    _adapter = PasswordAdapter


# =============================================================================
# AUDIT
# =============================================================================

class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit trail kept in process memory."""

    def __init__(self, database: InMemoryDatabase):
        self._db = database

    async def append_event(self, event: AuditEvent) -> bool:
        self._db.audit_events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._db.audit_events if e.correlation_id == correlation_id]

    async def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._db.audit_events
            if e.entity_type == entity_type and e.entity_id == str(entity_id)
        ]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._db.audit_events))[:limit]
