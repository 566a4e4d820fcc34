"""
Partial-update DTOs

Same shape as the entities, but every field except `id` is optional.
A field left as None means "do not touch" for update operations.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from budgetly.models.value_objects import (
    DateEpoch,
    Description,
    Email,
    Goal,
    Id,
    InstallmentsNumber,
    MoneyValue,
    Name,
    Plan,
)


def _iso(value: Optional[DateEpoch]) -> Optional[str]:
    return value.to_iso() if value else None


class BillDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Id
    name: Optional[Name] = None
    value: Optional[MoneyValue] = None
    description: Optional[Description] = None
    installments_number: Optional[InstallmentsNumber] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "name": str(self.name) if self.name else None,
            "value": self.value.to_number() if self.value else None,
            "description": str(self.description) if self.description else None,
            "installments_number": (
                self.installments_number.to_number()
                if self.installments_number else None
            ),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }


class PlanningDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Id
    name: Optional[Name] = None
    goal: Optional[Goal] = None
    goal_value: Optional[MoneyValue] = None
    plan: Optional[Plan] = None
    description: Optional[Description] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "name": str(self.name) if self.name else None,
            "description": str(self.description) if self.description else None,
            "goal": str(self.goal) if self.goal else None,
            "goal_value": self.goal_value.to_number() if self.goal_value else None,
            "plan": str(self.plan) if self.plan else None,
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }


class UserDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Id
    name: Optional[Name] = None
    birthdate: Optional[DateEpoch] = None
    email: Optional[Email] = None
    salary: Optional[MoneyValue] = None
    updated_at: Optional[DateEpoch] = None
    deleted_at: Optional[DateEpoch] = None

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "name": str(self.name) if self.name else None,
            "birthdate": _iso(self.birthdate),
            "email": str(self.email) if self.email else None,
            "salary": self.salary.to_number() if self.salary else None,
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }
