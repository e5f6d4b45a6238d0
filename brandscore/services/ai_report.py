"""
AI report generator — Gemini with Google Search grounding.

Each attempt is one blocking generate_content call followed by a strict
decode of the returned text. A decode failure costs an attempt just like a
network error does.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import Field, ValidationError

from ..config import Settings
from ..models import CamelModel, CategoryAnalysis, PerceptionGap, TechnicalSignal
from .retry import RetryPolicy, Sleep, fixed_delay, run_with_retry

logger = logging.getLogger(__name__)


class ReportParseError(ValueError):
    """Model output was not a JSON object matching AIReportPayload."""


class AIReportPayload(CamelModel):
    """
    What the model is allowed to return. Top-level fields may be missing
    (the merger fills defaults); anything present must be well-typed.
    """
    momentum_score: Optional[int] = Field(None, ge=0, le=100)
    business_context: Optional[str] = None
    executive_summary: Optional[str] = None
    technical_signals: Optional[List[TechnicalSignal]] = None
    categories: Optional[List[CategoryAnalysis]] = None
    perception_gap: Optional[PerceptionGap] = None


@dataclass
class DecodeResult:
    payload: Optional[AIReportPayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


@dataclass
class GeneratedReport:
    payload: AIReportPayload
    grounding_urls: List[str] = field(default_factory=list)


def extract_json_object(text: str) -> str:
    """Strip markdown fences and keep the span from the first '{' to the last '}'."""
    cleaned = (text or "").replace("```json", "").replace("```", "")
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ReportParseError("Response does not contain a JSON object")
    return cleaned[start:end + 1]


def decode_report(text: str) -> DecodeResult:
    try:
        raw = json.loads(extract_json_object(text))
    except ReportParseError as e:
        return DecodeResult(error=str(e))
    except json.JSONDecodeError as e:
        return DecodeResult(error=f"Invalid JSON syntax from AI: {e}")

    if not isinstance(raw, dict):
        return DecodeResult(error="Top-level JSON value is not an object")

    try:
        return DecodeResult(payload=AIReportPayload.model_validate(raw))
    except ValidationError as e:
        return DecodeResult(error=f"Schema mismatch: {e.error_count()} error(s): {str(e)[:300]}")


def extract_grounding_urls(response: Any, limit: int = 5) -> List[str]:
    """Source URIs from the first candidate's grounding metadata, de-duplicated."""
    urls: List[str] = []
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return urls
    metadata = getattr(candidates[0], "grounding_metadata", None)
    for chunk in getattr(metadata, "grounding_chunks", None) or []:
        uri = getattr(getattr(chunk, "web", None), "uri", None)
        if uri and uri not in urls:
            urls.append(uri)
    return urls[:limit]


def make_client(settings: Settings) -> Optional[genai.Client]:
    if not settings.google_gemini_api_key:
        return None
    return genai.Client(api_key=settings.google_gemini_api_key)


async def generate_report(
    prompt: str,
    settings: Settings,
    client: genai.Client,
    sleep: Sleep = asyncio.sleep,
) -> Optional[GeneratedReport]:
    """Up to ai_max_attempts sequential attempts. None once the budget is spent."""
    config = types.GenerateContentConfig(
        tools=[types.Tool(google_search=types.GoogleSearch())],
        temperature=settings.ai_temperature,
    )
    policy = RetryPolicy(
        max_attempts=settings.ai_max_attempts,
        backoff=fixed_delay(settings.ai_retry_delay_seconds),
        name="Gemini audit",
    )

    async def attempt(n: int) -> GeneratedReport:
        logger.info(f"AI attempt {n}/{settings.ai_max_attempts} ({settings.gemini_model})")
        response = await client.aio.models.generate_content(
            model=settings.gemini_model,
            contents=prompt,
            config=config,
        )
        decoded = decode_report(response.text or "")
        if not decoded.ok:
            raise ReportParseError(decoded.error)
        return GeneratedReport(
            payload=decoded.payload,
            grounding_urls=extract_grounding_urls(response, settings.max_grounding_urls),
        )

    try:
        return await run_with_retry(attempt, policy, sleep=sleep)
    except Exception as e:
        logger.error(f"All AI attempts failed: {e}")
        return None
