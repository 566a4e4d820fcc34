"""
Request Parameter Validation

Presence checks for raw request payloads, run before any value object is
built. Format and range checks are the value objects' job, not this one.
"""

from typing import Any, Iterable, Mapping

from budgetly.exceptions import BadRequestError


def validate_required_fields(obj: Mapping[str, Any], required_fields: Iterable[str]) -> None:
    """
    Ensure every field in `required_fields` is present and not None.

    Falsy values like "" or 0 count as present.

    Raises:
        BadRequestError: "Missing required parameter: <field>" for the first
            missing field, in the order given
    """
    for field in required_fields:
        if obj.get(field) is None:
            raise BadRequestError(f"Missing required parameter: {field}")
