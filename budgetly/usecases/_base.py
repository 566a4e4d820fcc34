"""
Shared CRUD Use Cases

Every aggregate (Bill, Planning, User) gets the same five operations.
The generic versions live here; the aggregate modules bind them to a
repository type and an entity label.

CRITICAL: Use cases never retry and never swallow. Whatever a repository
raises reaches the caller unchanged.
"""

from typing import Any, Generic, Optional, TypeVar, Union

from budgetly.audit import AuditLogger
from budgetly.exceptions import BadRequestError, NotFoundError
from budgetly.models.value_objects import Bool, Id
from budgetly.services.storage.interface import (
    CommandRepository,
    Filter,
    QueryRepository,
)


EntityT = TypeVar("EntityT")
DtoT = TypeVar("DtoT")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def require_filter(filter: Optional[Filter]) -> dict:
    """
    Drop empty values from `filter`, refusing filters left with nothing.

    Raises:
        BadRequestError: If no usable filter value remains
    """
    cleaned = {
        key: value
        for key, value in (filter or {}).items()
        if not _is_empty(value)
    }
    if not cleaned:
        raise BadRequestError("At least one filter must be provided")
    return cleaned


def as_bool(value: Union[Bool, bool, int]) -> bool:
    """Accept a Bool value object or anything Bool accepts."""
    if isinstance(value, Bool):
        return value.to_boolean()
    return Bool(value).to_boolean()


class CreateEntity(Generic[EntityT]):

    def __init__(self, repository: CommandRepository):
        self._repository = repository

    async def execute(self, entity: EntityT) -> EntityT:
        return await self._repository.create(entity)


class UpdateEntity(Generic[DtoT]):
    """Apply a partial DTO. Fields left as None are untouched."""

    def __init__(self, repository: CommandRepository):
        self._repository = repository

    async def execute(self, dto: DtoT) -> None:
        await self._repository.update(dto)


class DeleteEntity:
    """
    Soft delete by default. `is_permanent` removes the record for good.
    """

    entity_type: str = "entity"

    def __init__(
        self,
        repository: CommandRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger

    async def execute(self, id: Id, is_permanent: Union[Bool, bool] = False) -> None:
        permanent = as_bool(is_permanent)
        if permanent:
            await self._repository.hard_delete(id)
        else:
            await self._repository.soft_delete(id)

        if self._audit_logger:
            await self._audit_logger.log_entity_deleted(
                self.entity_type, str(id), permanent
            )


class FindEntity(Generic[EntityT]):
    """
    Look up exactly one entity.

    An `id` in the filter wins over every other key and goes through the
    direct `get` path.
    """

    not_found_message: str = "Entity not found"

    def __init__(self, repository: QueryRepository):
        self._repository = repository

    async def _lookup(self, filter: dict) -> Optional[EntityT]:
        if "id" in filter:
            return await self._repository.get(Id(str(filter["id"])))
        return await self._repository.find(filter)

    async def execute(self, filter: Optional[Filter] = None) -> EntityT:
        entity = await self._lookup(require_filter(filter))
        if entity is None:
            raise NotFoundError(self.not_found_message)
        return entity


class ListEntities(Generic[EntityT]):
    """List entities, restricted by `filter` when one is given."""

    def __init__(self, repository: QueryRepository):
        self._repository = repository

    async def execute(self, filter: Optional[Filter] = None) -> list[EntityT]:
        if not filter:
            return await self._repository.list()
        return await self._repository.list(filter)
