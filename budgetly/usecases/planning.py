"""
Planning Use Cases

CRUD over plannings, plus GeneratePlanning.

GeneratePlanning BOUNDARIES:
- The AI only writes the plan's name, narrative and rationale.
- Goal, goal value, owner and dates come from the caller, never from
  the model.
- The AI reply is schema-validated before anything is persisted. A reply
  that breaks a length limit is a ServiceException, not a bad request.
"""

from typing import Optional

from pydantic import BaseModel, ValidationError

from budgetly.audit import AuditLogger
from budgetly.exceptions import BadRequestError, InvalidParam, ServiceException
from budgetly.models.dtos import PlanningDTO
from budgetly.models.entities import Planning, User
from budgetly.models.summary import BillsSummary
from budgetly.models.value_objects import (
    DateEpoch,
    Description,
    Goal,
    Id,
    MoneyValue,
    Name,
    Plan,
)
from budgetly.services.ai import AIService
from budgetly.services.storage.interface import PlanningCommandRepository
from budgetly.usecases._base import (
    CreateEntity,
    DeleteEntity,
    FindEntity,
    ListEntities,
    UpdateEntity,
)
from budgetly.usecases.summary import GetBillsSummary


class CreatePlanning(CreateEntity[Planning]):
    pass


class UpdatePlanning(UpdateEntity[PlanningDTO]):
    pass


class DeletePlanning(DeleteEntity):
    entity_type = "planning"


class FindPlanning(FindEntity[Planning]):
    not_found_message = "Planning not found"


class ListPlanning(ListEntities[Planning]):
    pass


# =============================================================================
# AI PLANNING GENERATION
# =============================================================================

PLANNING_OUTPUT_SCHEMA = {
    "title": "planning_generation",
    "description": "Planning generation",
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Name of the planning",
            "minLength": Name.min_length,
            "maxLength": Name.max_length,
        },
        "plan": {
            "type": "string",
            "description": "Plan to achieve the goal",
            "minLength": Plan.min_length,
            "maxLength": Plan.max_length,
        },
        "description": {
            "type": "string",
            "maxLength": Description.max_length,
            "description": (
                "Description why the plan was generated and how it "
                "was relevant to achieve the goal"
            ),
        },
    },
    "required": ["name", "plan", "description"],
    "additionalProperties": False,
}


class PlanningDraft(BaseModel):
    """What the model must return."""
    name: str
    plan: str
    description: str = ""


def build_planning_prompt(
    user: User,
    bills_summary: BillsSummary,
    goal: Goal,
    goal_value: MoneyValue,
    description: Optional[Description] = None,
    previous_planning: Optional[Planning] = None,
) -> str:
    """Prompt for the financial planning agent."""
    context_parts = [
        f"- Bills summary: {bills_summary.model_dump_json()}",
        f"- Goal: {goal}",
        f"- Goal value: {goal_value.to_number()}",
        f"- User's salary: {user.salary.to_number()}",
    ]
    if description:
        context_parts.append(f"- Description: {description}")
    if previous_planning:
        context_parts.append(
            "- Previous plan (revise it, keep what still applies): "
            f"{previous_planning.plan}"
        )
    context = "\n".join(context_parts)

    return f"""# Financial Planning Agent

You are a financial expert helping a user named {user.name} reach a savings goal.
Analyse the user's situation and write a plan to achieve the goal.

## Rules
- The plan must be concise and to the point.
- The plan must be realistic and achievable with the user's salary and bills.
- The plan must be easy to follow, measure and adjust.
- You may recommend cancelling bills that are not necessary if it helps reach the goal.
- You must never recommend skipping payment of a bill.
- Write in the user's language and currency.

## Inputs
- Bills summary: the user's bills. total_value is this month's total
  (installments + fixed + monthly misc). partial_value_next_month,
  partial_value_2_months_later and partial_value_3_months_later are the
  installment amounts with 1, 2 and 3+ payments left.
- Goal and goal value: what the user wants and how much it costs.
- User's salary: monthly income.

## Situation
{context}
"""


class GeneratePlanning:
    """
    Generate a Planning with the AI service and persist it.

    Raises:
        BadRequestError: If the user has no salary
        ServiceException: If the AI call fails or its reply doesn't match
            the schema
    """

    def __init__(
        self,
        planning_command: PlanningCommandRepository,
        get_bills_summary: GetBillsSummary,
        ai_service: AIService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._planning_command = planning_command
        self._get_bills_summary = get_bills_summary
        self._ai_service = ai_service
        self._audit_logger = audit_logger

    async def execute(
        self,
        user: User,
        goal: Goal,
        goal_value: MoneyValue,
        description: Optional[Description] = None,
        previous_planning: Optional[Planning] = None,
    ) -> Planning:
        if user.salary is None:
            raise BadRequestError("User does not have a salary")

        bills_summary = await self._get_bills_summary.execute(user.id)
        prompt = build_planning_prompt(
            user, bills_summary, goal, goal_value, description, previous_planning
        )

        result = await self._ai_service.generate_structured(prompt, PLANNING_OUTPUT_SCHEMA)

        try:
            draft = PlanningDraft.model_validate(result.data)
        except ValidationError as e:
            raise ServiceException(f"AI response did not match the planning schema: {e}")

        try:
            name = Name(draft.name)
            plan = Plan(draft.plan)
            planning_description = (
                Description(draft.description) if draft.description else None
            )
        except InvalidParam as e:
            # Out-of-range text from the model is reported as a service failure
            raise ServiceException(f"AI response did not match the planning schema: {e}")

        planning = await self._planning_command.create(
            Planning(
                id=Id.generate(),
                user_id=user.id,
                name=name,
                goal=goal,
                goal_value=goal_value,
                plan=plan,
                created_at=DateEpoch.now(),
                description=planning_description,
            )
        )

        if self._audit_logger:
            await self._audit_logger.log_planning_generated(
                str(planning.id), str(user.id), result.model
            )

        return planning
