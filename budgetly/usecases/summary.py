"""
Summary Aggregation

Rolling projection of a user's bills for the current month and the next
three, used by the dashboard and by the planning prompt.

BUCKETS:
- Fixed bill (no installments): due every month, always counted.
- Monthly misc bill (1 installment): counted only in the month it was
  created.
- Installment bill (N > 1 installments): one installment is paid per
  calendar month since creation. Once all N are paid the bill is
  finished and drops out of every total.

Remaining installments drive the forward projection:
    1 left  -> partial_value_next_month
    2 left  -> partial_value_2_months_later
    3+ left -> partial_value_3_months_later

Pure computation over already-loaded bills. The only I/O is the bill list.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from budgetly.exceptions import NotFoundError
from budgetly.models.entities import Bill
from budgetly.models.summary import BillsSummary, UserSummary
from budgetly.models.value_objects import Id
from budgetly.services.storage.interface import BillQueryRepository, UserQueryRepository


Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def months_since_creation(bill: Bill, now: datetime) -> int:
    """Calendar months from the bill's creation to `now` (negative if created later)."""
    year, month = bill.created_at.year_month()
    return (now.year - year) * 12 + (now.month - month)


def installments_paid(bill: Bill, now: datetime) -> int:
    total = bill.installments_number.to_number()
    months = months_since_creation(bill, now)
    return min(max(months, 0), total)


def _total(bills: Iterable[Bill]) -> float:
    return round(sum(bill.value.to_number() for bill in bills), 2)


def _names(bills: Iterable[Bill]) -> str:
    return ", ".join(str(bill.name) for bill in bills)


def summarize_bills(bills: Iterable[Bill], now: datetime) -> BillsSummary:
    """
    Aggregate `bills` as seen at `now`.

    Soft-deleted bills are skipped.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    bills = [bill for bill in bills if not bill.is_deleted]

    fixed = [b for b in bills if b.installments_number is None]
    misc = [
        b for b in bills
        if b.installments_number is not None and b.installments_number.to_number() == 1
    ]
    installment = [
        b for b in bills
        if b.installments_number is not None and b.installments_number.to_number() > 1
    ]

    this_month_misc = [
        b for b in misc
        if months_since_creation(b, now) == 0
    ]

    active_installments: list[Bill] = []
    remaining_buckets: dict[int, list[Bill]] = {1: [], 2: [], 3: []}
    for bill in installment:
        remaining = bill.installments_number.to_number() - installments_paid(bill, now)
        if remaining == 0:
            continue
        active_installments.append(bill)
        remaining_buckets[min(remaining, 3)].append(bill)

    total_installment_value = _total(active_installments)
    total_fixed_bills_value = _total(fixed)
    total_monthly_misc_bills_value = _total(this_month_misc)
    partial_next = _total(remaining_buckets[1])
    partial_2 = _total(remaining_buckets[2])
    partial_3 = _total(remaining_buckets[3])

    total_value = round(
        total_installment_value + total_fixed_bills_value + total_monthly_misc_bills_value,
        2,
    )

    return BillsSummary(
        bills_active_count=len(active_installments) + len(fixed) + len(this_month_misc),
        total_bill_amount=round(total_value + partial_next + partial_2 + partial_3, 2),
        total_value=total_value,
        total_installment_value=total_installment_value,
        total_fixed_bills_value=total_fixed_bills_value,
        total_monthly_misc_bills_value=total_monthly_misc_bills_value,
        partial_value_next_month=partial_next,
        partial_value_2_months_later=partial_2,
        partial_value_3_months_later=partial_3,
        fixed_bills_names=_names(fixed),
        monthly_misc_bills_names=_names(misc),
        installment_bills_names=_names(installment),
    )


class GetBillsSummary:
    """
    Args:
        bill_query: Bill read repository
        clock: Returns "now" as a UTC datetime. Injected by tests.
    """

    def __init__(
        self,
        bill_query: BillQueryRepository,
        clock: Optional[Clock] = None,
    ):
        self._bill_query = bill_query
        self._clock = clock or _utc_now

    async def execute(self, user_id: Id) -> BillsSummary:
        bills = await self._bill_query.list({"user_id": str(user_id)})
        return summarize_bills(bills, self._clock())


class GetUserSummary:
    """Dashboard summary: the user's profile numbers plus their bills summary."""

    def __init__(
        self,
        user_query: UserQueryRepository,
        get_bills_summary: GetBillsSummary,
    ):
        self._user_query = user_query
        self._get_bills_summary = get_bills_summary

    async def execute(self, user_id: Id) -> UserSummary:
        user = await self._user_query.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        bills_summary = await self._get_bills_summary.execute(user_id)

        return UserSummary(
            id=str(user.id),
            name=str(user.name),
            salary=user.salary.to_number() if user.salary else None,
            bills_active_count=bills_summary.bills_active_count,
            plannings_count=len(user.plannings),
            total_bills_value_monthly=bills_summary.total_value,
            partial_value_next_month=bills_summary.partial_value_next_month,
            partial_value_2_months_later=bills_summary.partial_value_2_months_later,
            partial_value_3_months_later=bills_summary.partial_value_3_months_later,
        )
