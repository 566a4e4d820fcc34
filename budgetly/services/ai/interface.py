"""AI text generation contract."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field


class AIUsage(BaseModel):
    """Token accounting, when the provider reports it."""
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class AIResponse(BaseModel):
    text: str
    model: str
    usage: Optional[AIUsage] = None


class AIStructuredResponse(BaseModel):
    data: Any = Field(description="Parsed JSON object matching the requested schema")
    model: str
    usage: Optional[AIUsage] = None


class AIService(ABC):
    """
    Interface consumed by GeneratePlanning.

    Implementations raise ServiceException on any failure. Callers
    propagate it unmodified.
    """

    @abstractmethod
    async def generate(self, prompt: str, model: Optional[str] = None) -> AIResponse:
        pass

    @abstractmethod
    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        model: Optional[str] = None,
    ) -> AIStructuredResponse:
        """
        Generate a JSON object conforming to `schema` (a JSON Schema dict).
        """
        pass
