"""
Data Models Package

This package contains all Pydantic models used in Budgetly.
All data flowing through the domain must conform to these schemas.
"""

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
    Password,
    PasswordHash,
    Plan,
)
from budgetly.models.entities import (
    Bill,
    Password as PasswordRecord,
    Planning,
    User,
)
from budgetly.models.dtos import BillDTO, PlanningDTO, UserDTO
from budgetly.models.summary import BillsSummary, UserSummary
from budgetly.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Value objects
    "Bool",
    "DateEpoch",
    "Description",
    "Email",
    "Goal",
    "Id",
    "InstallmentsNumber",
    "MoneyValue",
    "Name",
    "Password",
    "PasswordHash",
    "Plan",
    # Entities
    "Bill",
    "PasswordRecord",
    "Planning",
    "User",
    # DTOs
    "BillDTO",
    "PlanningDTO",
    "UserDTO",
    # Summaries
    "BillsSummary",
    "UserSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
