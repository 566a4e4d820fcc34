"""User use cases."""

from typing import Optional

from budgetly.models.dtos import UserDTO
from budgetly.models.entities import User
from budgetly.models.value_objects import Email
from budgetly.usecases._base import (
    CreateEntity,
    DeleteEntity,
    FindEntity,
    ListEntities,
    UpdateEntity,
)


class CreateUser(CreateEntity[User]):
    pass


class UpdateUser(UpdateEntity[UserDTO]):
    pass


class DeleteUser(DeleteEntity):
    entity_type = "user"


class FindUser(FindEntity[User]):
    """
    Lookup order: `id` -> `get`, then `email` -> `get_by_email`,
    otherwise a generic `find` over the remaining keys.
    """

    not_found_message = "User not found"

    async def _lookup(self, filter: dict) -> Optional[User]:
        if "id" not in filter and "email" in filter:
            return await self._repository.get_by_email(Email(str(filter["email"])))
        return await super()._lookup(filter)


class ListUser(ListEntities[User]):
    pass
