"""
Core Entities for Budgetly

Aggregates composed entirely from value objects. Once an entity exists,
every one of its fields is valid for the entity's whole lifetime.

Entities perform no I/O. `to_json()` is the only way raw primitives leave
an entity - it produces the plain-data projection used on the wire and,
through the adapters, in persistence.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

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


def _iso(value: Optional[DateEpoch]) -> Optional[str]:
    return value.to_iso() if value else None


def _text(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class Bill(BaseModel):
    """
    A recurring or one-off expense belonging to a user.

    installments_number:
    - None -> fixed bill, paid every month
    - 1    -> monthly miscellaneous expense
    - > 1  -> purchase split into N monthly installments
    """
    model_config = ConfigDict(frozen=True)

    id: Id
    user_id: Id
    name: Name
    value: MoneyValue
    created_at: DateEpoch
    description: Optional[Description] = None
    installments_number: Optional[InstallmentsNumber] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "name": str(self.name),
            "value": self.value.to_number(),
            "description": _text(self.description),
            "installments_number": (
                self.installments_number.to_number()
                if self.installments_number else None
            ),
            "created_at": self.created_at.to_iso(),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }


class Planning(BaseModel):
    """A savings plan towards a goal, with the narrative plan to get there."""
    model_config = ConfigDict(frozen=True)

    id: Id
    user_id: Id
    name: Name
    goal: Goal
    goal_value: MoneyValue
    plan: Plan
    created_at: DateEpoch
    description: Optional[Description] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "name": str(self.name),
            "description": _text(self.description),
            "goal": str(self.goal),
            "goal_value": self.goal_value.to_number(),
            "plan": str(self.plan),
            "created_at": self.created_at.to_iso(),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }


class Password(BaseModel):
    """
    A stored password record.

    A user accumulates one record per password they have ever had.
    At most one of them should be active - the use cases enforce that,
    not this entity.
    """
    model_config = ConfigDict(frozen=True)

    id: Id
    user_id: Id
    password: PasswordHash
    active: Bool
    created_at: DateEpoch

    def is_active(self) -> bool:
        return self.active.to_boolean()

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "password": str(self.password),
            "active": self.active.to_boolean(),
            "created_at": self.created_at.to_iso(),
        }


class User(BaseModel):
    """
    A person using the app.

    `password`, `bills` and `plannings` are loaded views of other
    aggregates. They are never persisted as part of the user record.
    """
    model_config = ConfigDict(frozen=True)

    id: Id
    name: Name
    birthdate: DateEpoch
    email: Email
    created_at: DateEpoch
    password: Optional[Password] = None
    bills: list[Bill] = Field(default_factory=list)
    plannings: list[Planning] = Field(default_factory=list)
    salary: Optional[MoneyValue] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "name": str(self.name),
            "birthdate": self.birthdate.to_iso(),
            "email": str(self.email),
            "salary": self.salary.to_number() if self.salary else None,
            "password": self.password.to_json() if self.password else None,
            "bills": [bill.to_json() for bill in self.bills],
            "plannings": [planning.to_json() for planning in self.plannings],
            "created_at": self.created_at.to_iso(),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }
