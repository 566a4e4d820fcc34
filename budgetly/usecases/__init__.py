"""
Use Cases Package

One class per operation, each with a single `async execute`.
Collaborators are injected through the constructor.
"""

from budgetly.usecases.auth import Login, LoginResult
from budgetly.usecases.bill import (
    CreateBill,
    DeleteBill,
    FindBill,
    ListBill,
    UpdateBill,
)
from budgetly.usecases.password import CreatePassword, ForgotPassword, ResetPassword
from budgetly.usecases.planning import (
    CreatePlanning,
    DeletePlanning,
    FindPlanning,
    GeneratePlanning,
    ListPlanning,
    PlanningDraft,
    UpdatePlanning,
)
from budgetly.usecases.summary import GetBillsSummary, GetUserSummary, summarize_bills
from budgetly.usecases.user import (
    CreateUser,
    DeleteUser,
    FindUser,
    ListUser,
    UpdateUser,
)

__all__ = [
    # Auth
    "Login",
    "LoginResult",
    # Bills
    "CreateBill",
    "DeleteBill",
    "FindBill",
    "ListBill",
    "UpdateBill",
    # Passwords
    "CreatePassword",
    "ForgotPassword",
    "ResetPassword",
    # Plannings
    "CreatePlanning",
    "DeletePlanning",
    "FindPlanning",
    "GeneratePlanning",
    "ListPlanning",
    "PlanningDraft",
    "UpdatePlanning",
    # Summaries
    "GetBillsSummary",
    "GetUserSummary",
    "summarize_bills",
    # Users
    "CreateUser",
    "DeleteUser",
    "FindUser",
    "ListUser",
    "UpdateUser",
]
