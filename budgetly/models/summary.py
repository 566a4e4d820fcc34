"""
Summary Models

Read-only projections produced by the aggregation use cases. These are
what the dashboard and the planning prompt consume.
"""

from typing import Optional

from pydantic import BaseModel, Field


class BillsSummary(BaseModel):
    """
    Aggregate view over a user's bills.

    Buckets:
    - fixed: bills without installments, due every month
    - monthly misc: single-installment bills created this month
    - installment: bills split in N > 1 installments still being paid
    """

    bills_active_count: int = Field(default=0, ge=0)

    total_bill_amount: float = Field(
        default=0.0,
        description="total_value plus the next-3-months partial values"
    )
    total_value: float = Field(
        default=0.0,
        description="Installment + fixed + monthly misc totals for this month"
    )
    total_installment_value: float = 0.0
    total_fixed_bills_value: float = 0.0
    total_monthly_misc_bills_value: float = 0.0

    partial_value_next_month: float = Field(
        default=0.0,
        description="Installments with exactly 1 payment left"
    )
    partial_value_2_months_later: float = Field(
        default=0.0,
        description="Installments with exactly 2 payments left"
    )
    partial_value_3_months_later: float = Field(
        default=0.0,
        description="Installments with 3 or more payments left"
    )

    fixed_bills_names: str = ""
    monthly_misc_bills_names: str = ""
    installment_bills_names: str = ""


class UserSummary(BaseModel):
    """Dashboard summary for one user."""

    id: str
    name: str
    salary: Optional[float] = None
    bills_active_count: int = Field(ge=0)
    plannings_count: int = Field(ge=0)
    total_bills_value_monthly: float
    partial_value_next_month: float
    partial_value_2_months_later: float
    partial_value_3_months_later: float
