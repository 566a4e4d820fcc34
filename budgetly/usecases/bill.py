"""Bill use cases."""

from budgetly.models.dtos import BillDTO
from budgetly.models.entities import Bill
from budgetly.usecases._base import (
    CreateEntity,
    DeleteEntity,
    FindEntity,
    ListEntities,
    UpdateEntity,
)


class CreateBill(CreateEntity[Bill]):
    pass


class UpdateBill(UpdateEntity[BillDTO]):
    pass


class DeleteBill(DeleteEntity):
    entity_type = "bill"


class FindBill(FindEntity[Bill]):
    not_found_message = "Bill not found"


class ListBill(ListEntities[Bill]):
    pass
