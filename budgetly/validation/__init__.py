"""Validation package."""

from budgetly.validation.params import validate_required_fields

__all__ = ["validate_required_fields"]
