"""
OpenAI vision provider for nutrition analysis.

Sends the photo to an OpenAI vision model through LangChain and parses the
JSON nutrition estimate it returns.
"""

import json
import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from .base import (
    NutritionAnalysis,
    NutritionAnalysisProvider,
    ProviderError,
    ProviderId,
)

logger = logging.getLogger(__name__)


NUTRITION_ANALYSIS_PROMPT = """Analyze this food image and provide detailed nutritional information. Return a JSON object with the following structure:
{
  "foodItems": [
    {
      "name": "food name",
      "quantity": "estimated portion size",
      "calories": number,
      "protein_g": number,
      "carbs_g": number,
      "fat_g": number,
      "fiber_g": number
    }
  ],
  "totalCalories": number,
  "totalProtein": number,
  "totalCarbs": number,
  "totalFat": number,
  "totalFiber": number,
  "confidenceScore": number (0-1),
  "analysisNotes": "any additional observations"
}

Guidelines:
- Provide realistic portion estimates
- If uncertain, provide ranges and note in analysisNotes
- Consider cooking methods and preparation
- Rate confidence based on image clarity and recognizability

Do not include any text outside the JSON."""


class OpenAINutritionProvider(NutritionAnalysisProvider):
    """
    Nutrition analysis using an OpenAI vision model.
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        *,
        api_key: str = "",
        model: str = "gpt-4o",
        temperature: float = 0.1,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        max_retries: int = 3,
    ):
        """
        Initialize OpenAI provider.

        Args:
            llm: Pre-built chat model (built from the other args when omitted)
            api_key: OpenAI API key; without one every call fails
            model: Vision-capable model name
            temperature: Sampling temperature
            max_tokens: Response token cap
            timeout: Request timeout in seconds
            max_retries: Retries performed by the OpenAI client itself
        """
        if llm is None and api_key:
            from langchain_openai import ChatOpenAI

            llm = ChatOpenAI(
                model=model,
                api_key=api_key,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
                max_retries=max_retries,
            )
        self._llm = llm
        self.model = model

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.OPENAI

    async def analyze(self, image_data: str) -> NutritionAnalysis:
        """
        Analyze a base64 food image with the OpenAI vision model.
        """
        if self._llm is None:
            raise ProviderError(
                message=(
                    "OpenAI API key not configured. "
                    "Set OPENAI_API_KEY in your .env file."
                ),
                provider=self.provider_id.value,
                error_code="NOT_CONFIGURED",
            )

        message = HumanMessage(
            content=[
                {"type": "text", "text": NUTRITION_ANALYSIS_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:image/jpeg;base64,{image_data}",
                        "detail": "high",
                    },
                },
            ]
        )

        logger.info(f"Sending nutrition analysis request to OpenAI ({self.model})")

        try:
            response = await self._llm.ainvoke([message])
        except Exception as e:
            raise ProviderError(
                message=f"OpenAI request failed: {e}",
                provider=self.provider_id.value,
                error_code="CONNECTION_ERROR",
            ) from e

        content = message_text(response.content)
        if not content.strip():
            raise ProviderError(
                message="No response from OpenAI",
                provider=self.provider_id.value,
                error_code="EMPTY_RESPONSE",
            )

        analysis = self._parse_response(content)

        logger.info(
            f"OpenAI analysis completed: {len(analysis.food_items)} items, "
            f"{analysis.total_calories} kcal, confidence={analysis.confidence_score}"
        )
        return analysis

    def _parse_response(self, raw_response: str) -> NutritionAnalysis:
        """Parse the model's JSON answer into a NutritionAnalysis."""
        json_str = extract_json(raw_response)
        if not json_str:
            logger.warning(f"Could not extract JSON from response: {raw_response[:500]}")
            raise ProviderError(
                message="Invalid JSON response from OpenAI",
                provider=self.provider_id.value,
                error_code="PARSE_ERROR",
            )

        try:
            return NutritionAnalysis.model_validate(json.loads(json_str))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to parse OpenAI response: {e}")
            raise ProviderError(
                message="Invalid JSON response from OpenAI",
                provider=self.provider_id.value,
                error_code="PARSE_ERROR",
                details={"content": raw_response[:500]},
            ) from e


def extract_json(text: str) -> str | None:
    """Extract the first balanced JSON object from a model response."""
    start = text.find("{")
    if start == -1:
        return None

    brace_count = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            brace_count += 1
        elif text[i] == "}":
            brace_count -= 1
            if brace_count == 0:
                return text[start : i + 1]

    return None


def message_text(content: str | list) -> str:
    """Join the text parts of a chat message's content."""
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
