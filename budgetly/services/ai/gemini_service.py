"""
Gemini AI Service

AIService backed by Google Gemini through google-generativeai.

CRITICAL BOUNDARIES:
- The model only WRITES text (a plan narrative). It never sees or
  returns anything that gets persisted without schema validation by the
  caller.
- Any failure surfaces as ServiceException. There is no silent fallback
  text - a planning with a made-up plan is worse than an error.
"""

import json
from typing import Any, Optional

import google.generativeai as genai
from tenacity import retry, stop_after_attempt, wait_exponential

from budgetly.exceptions import ServiceException
from budgetly.services.ai.interface import (
    AIResponse,
    AIService,
    AIStructuredResponse,
    AIUsage,
)


def _extract_json(text: str) -> Any:
    """Parse the first {...} object in `text`, tolerating prose or code fences around it."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ServiceException("AI response did not contain a JSON object")
    try:
        return json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise ServiceException(f"AI response was not valid JSON: {e}")


def _usage_from(response: Any) -> Optional[AIUsage]:
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    return AIUsage(
        prompt_tokens=getattr(metadata, "prompt_token_count", None),
        completion_tokens=getattr(metadata, "candidates_token_count", None),
        total_tokens=getattr(metadata, "total_token_count", None),
    )


class GeminiAIService(AIService):
    """
    Args:
        api_key: Gemini API key
        model_name: Default model when a call doesn't name one
        max_tokens: max_output_tokens for every call
        temperature: Sampling temperature for every call
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        max_tokens: int = 2048,
        temperature: float = 0.4,
    ):
        if not api_key:
            raise ServiceException("Missing Gemini API key")
        genai.configure(api_key=api_key)
        self._default_model = model_name
        self._max_tokens = max_tokens
        self._temperature = temperature

    def _model(self, model_name: str, json_mode: bool) -> "genai.GenerativeModel":
        generation_config = {
            "temperature": self._temperature,
            "max_output_tokens": self._max_tokens,
        }
        if json_mode:
            generation_config["response_mime_type"] = "application/json"
        return genai.GenerativeModel(
            model_name=model_name,
            generation_config=generation_config,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _call_model(self, model_name: str, prompt: str, json_mode: bool) -> Any:
        return await self._model(model_name, json_mode).generate_content_async(prompt)

    async def _complete(
        self,
        prompt: str,
        model: Optional[str],
        json_mode: bool,
    ) -> tuple[str, str, Any]:
        if not prompt or not prompt.strip():
            raise ServiceException("Prompt cannot be empty")

        model_name = model or self._default_model
        try:
            response = await self._call_model(model_name, prompt, json_mode)
            # `.text` raises ValueError when the candidate was blocked
            text = response.text
        except Exception as e:
            raise ServiceException(f"Failed to generate AI response: {e}")

        if not text or not text.strip():
            raise ServiceException("Invalid response format from Gemini API")
        return text, model_name, response

    async def generate(self, prompt: str, model: Optional[str] = None) -> AIResponse:
        text, model_name, response = await self._complete(prompt, model, json_mode=False)
        return AIResponse(
            text=text.strip(),
            model=model_name,
            usage=_usage_from(response),
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        model: Optional[str] = None,
    ) -> AIStructuredResponse:
        structured_prompt = (
            f"{prompt}\n\n"
            "Respond with ONLY a JSON object that matches this JSON Schema:\n"
            f"{json.dumps(schema, indent=2)}"
        )
        text, model_name, response = await self._complete(
            structured_prompt, model, json_mode=True
        )
        return AIStructuredResponse(
            data=_extract_json(text),
            model=model_name,
            usage=_usage_from(response),
        )
