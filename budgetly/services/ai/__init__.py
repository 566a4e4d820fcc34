"""AI services package."""

from budgetly.services.ai.interface import (
    AIResponse,
    AIService,
    AIStructuredResponse,
    AIUsage,
)
from budgetly.services.ai.gemini_service import GeminiAIService

__all__ = [
    "AIResponse",
    "AIService",
    "AIStructuredResponse",
    "AIUsage",
    "GeminiAIService",
]
