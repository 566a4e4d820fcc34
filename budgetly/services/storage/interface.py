"""
Abstract Storage Interface

DESIGN DECISION: Persistence is split into command and query repositories
per aggregate. Use cases depend only on these ABCs, which allows us to:
1. Swap the in-memory backend for a real database later
2. Use in-memory storage or mocks for testing
3. Keep business logic decoupled from storage implementation

Lookups return None when nothing matches. Turning a miss into a
NotFoundError is the use case's decision, not the repository's.

Filters are plain mappings over snake_case record field names, e.g.
{"user_id": "...", "active": True}. Every key must match.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar
from uuid import UUID

from budgetly.models.audit import AuditEvent
from budgetly.models.dtos import BillDTO, PlanningDTO, UserDTO
from budgetly.models.entities import Bill, Password, Planning, User
from budgetly.models.value_objects import Email, Id


Filter = Mapping[str, Any]

EntityT = TypeVar("EntityT")
DtoT = TypeVar("DtoT")


# =============================================================================
# GENERIC CONTRACTS
# =============================================================================

class CommandRepository(ABC, Generic[EntityT, DtoT]):
    """
    Write side of an aggregate.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def create(self, entity: EntityT) -> EntityT:
        """
        Persist a new entity.

        Returns:
            The entity as stored

        Raises:
            DatabaseException: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, dto: DtoT) -> None:
        """
        Apply the non-None fields of `dto` to the stored entity.

        Raises:
            DatabaseException: If the entity doesn't exist or the write fails
        """
        pass

    @abstractmethod
    async def soft_delete(self, id: Id) -> None:
        """Mark the entity as deleted, keeping the record."""
        pass

    @abstractmethod
    async def hard_delete(self, id: Id) -> None:
        """Remove the record permanently."""
        pass


class QueryRepository(ABC, Generic[EntityT]):
    """Read side of an aggregate."""

    @abstractmethod
    async def get(self, id: Id) -> Optional[EntityT]:
        """
        Retrieve an entity by its ID.

        Returns:
            The entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find(self, filter: Filter) -> Optional[EntityT]:
        """
        Return the first entity matching every key of `filter`.

        Returns:
            The entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(self, filter: Optional[Filter] = None) -> list[EntityT]:
        """
        List entities, optionally restricted by `filter`.

        Returns:
            Matching entities (possibly empty)
        """
        pass


# =============================================================================
# AGGREGATE REPOSITORIES
# =============================================================================

class BillCommandRepository(CommandRepository[Bill, BillDTO]):
    pass


class BillQueryRepository(QueryRepository[Bill]):
    pass


class PlanningCommandRepository(CommandRepository[Planning, PlanningDTO]):
    pass


class PlanningQueryRepository(QueryRepository[Planning]):
    pass


class UserCommandRepository(CommandRepository[User, UserDTO]):
    pass


class UserQueryRepository(QueryRepository[User]):
    """
    User lookups.

    A loaded user carries its active password record and its non-deleted
    bills and plannings.
    """

    @abstractmethod
    async def get_by_email(self, email: Email) -> Optional[User]:
        """
        Retrieve a user by email address.

        Returns:
            The user if found, None otherwise
        """
        pass


class PasswordCommandRepository(ABC):
    """
    Write side of password records.

    Records are never updated in place. A new password is a new record,
    and the previous one is deactivated.
    """

    @abstractmethod
    async def create(self, password: Password) -> Password:
        """Persist a new password record."""
        pass

    @abstractmethod
    async def deactivate(self, id: Id) -> None:
        """Set `active` to False on an existing record."""
        pass

    @abstractmethod
    async def replace_active(self, old_id: Id, new_password: Password) -> Password:
        """
        Deactivate `old_id` and store `new_password` as one operation.

        CRITICAL: Either both changes happen or neither does. A user must
        never be left with zero or two active passwords.

        Raises:
            DatabaseException: If `old_id` doesn't exist or the write fails
        """
        pass


class PasswordQueryRepository(QueryRepository[Password]):
    pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass
