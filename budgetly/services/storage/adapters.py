"""
Record <-> Entity Adapters

Translate between persisted records (plain dicts with snake_case keys) and
domain entities/DTOs.

CRITICAL: `to_entity` builds every value object, so a corrupt record
raises InvalidParam here instead of leaking into the domain.

Falsy optional fields (None, "", 0) are read as absent.
"""

from typing import Any, Callable, Optional, TypeVar

from budgetly.models.dtos import BillDTO, PlanningDTO, UserDTO
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


T = TypeVar("T")


def _optional(record: dict, key: str, factory: Callable[[Any], T]) -> Optional[T]:
    value = record.get(key)
    return factory(value) if value else None


def _drop_none(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


class BillAdapter:

    @staticmethod
    def to_entity(record: dict, user_id: Optional[Any] = None) -> Bill:
        return Bill(
            id=Id(record["id"]),
            user_id=Id(user_id if user_id is not None else record["user_id"]),
            name=Name(record["name"]),
            value=MoneyValue(record["value"]),
            created_at=DateEpoch(record["created_at"]),
            description=_optional(record, "description", Description),
            installments_number=_optional(record, "installments_number", InstallmentsNumber),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_model(entity: Bill) -> dict:
        return entity.to_json()

    @staticmethod
    def to_dto(record: dict) -> BillDTO:
        return BillDTO(
            id=Id(record["id"]),
            name=_optional(record, "name", Name),
            value=_optional(record, "value", MoneyValue),
            description=_optional(record, "description", Description),
            installments_number=_optional(record, "installments_number", InstallmentsNumber),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_partial_model(dto: BillDTO) -> dict:
        return _drop_none(dto.to_json())


class PlanningAdapter:

    @staticmethod
    def to_entity(record: dict, user_id: Optional[Any] = None) -> Planning:
        return Planning(
            id=Id(record["id"]),
            user_id=Id(user_id if user_id is not None else record["user_id"]),
            name=Name(record["name"]),
            goal=Goal(record["goal"]),
            goal_value=MoneyValue(record["goal_value"]),
            plan=Plan(record["plan"]),
            created_at=DateEpoch(record["created_at"]),
            description=_optional(record, "description", Description),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_model(entity: Planning) -> dict:
        return entity.to_json()

    @staticmethod
    def to_dto(record: dict) -> PlanningDTO:
        return PlanningDTO(
            id=Id(record["id"]),
            name=_optional(record, "name", Name),
            goal=_optional(record, "goal", Goal),
            goal_value=_optional(record, "goal_value", MoneyValue),
            plan=_optional(record, "plan", Plan),
            description=_optional(record, "description", Description),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_partial_model(dto: PlanningDTO) -> dict:
        return _drop_none(dto.to_json())


class PasswordAdapter:

    @staticmethod
    def to_entity(record: dict, user_id: Optional[Any] = None) -> Password:
        # `active` is legitimately False, so it bypasses the falsy rule.
        return Password(
            id=Id(record["id"]),
            user_id=Id(user_id if user_id is not None else record["user_id"]),
            password=PasswordHash(record["password"]),
            active=Bool(record["active"]),
            created_at=DateEpoch(record["created_at"]),
        )

    @staticmethod
    def to_model(entity: Password) -> dict:
        return entity.to_json()


class UserAdapter:

    @staticmethod
    def to_entity(record: dict) -> User:
        """
        Build a User, including any nested password/bills/plannings.

        Nested records inherit the user's id as their `user_id`.
        """
        user_id = record["id"]
        password = record.get("password")
        return User(
            id=Id(user_id),
            name=Name(record["name"]),
            birthdate=DateEpoch(record["birthdate"]),
            email=Email(record["email"]),
            created_at=DateEpoch(record["created_at"]),
            password=PasswordAdapter.to_entity(password, user_id) if password else None,
            bills=[
                BillAdapter.to_entity(bill, user_id)
                for bill in record.get("bills") or []
            ],
            plannings=[
                PlanningAdapter.to_entity(planning, user_id)
                for planning in record.get("plannings") or []
            ],
            salary=_optional(record, "salary", MoneyValue),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_model(entity: User) -> dict:
        """Persistence projection of the user row only."""
        model = entity.to_json()
        for key in ("password", "bills", "plannings"):
            model.pop(key)
        return model

    @staticmethod
    def to_dto(record: dict) -> UserDTO:
        return UserDTO(
            id=Id(record["id"]),
            name=_optional(record, "name", Name),
            birthdate=_optional(record, "birthdate", DateEpoch),
            email=_optional(record, "email", Email),
            salary=_optional(record, "salary", MoneyValue),
            updated_at=_optional(record, "updated_at", DateEpoch),
            deleted_at=_optional(record, "deleted_at", DateEpoch),
        )

    @staticmethod
    def to_partial_model(dto: UserDTO) -> dict:
        return _drop_none(dto.to_json())
