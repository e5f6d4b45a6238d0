"""
Audit orchestration: normalize → scan → format → prompt → generate → merge.

perform_brand_audit never raises. Missing credentials, provider failures
and unusable AI output all end in the deterministic fallback report.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

import httpx
from google import genai

from ..config import Settings
from ..models import AuditResult, BrandIdentity, DebugLog, Question, QuestionnaireResponse
from ..questions import QUESTIONS
from ..utils.urls import normalize_url
from .ai_report import generate_report, make_client
from .fallback import build_fallback_result
from .merger import merge_report
from .pagespeed import collect_technical_data, unavailable
from .prompt_builder import build_audit_prompt
from .retry import Sleep
from .signals import build_technical_signals, format_quiz_answers

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuditContext:
    """Everything an audit needs from the outside world. Built once per process."""
    settings: Settings
    http: httpx.AsyncClient
    ai_client: Optional[genai.Client] = None
    questions: List[Question] = field(default_factory=lambda: list(QUESTIONS))
    sleep: Sleep = asyncio.sleep
    clock: Callable[[], datetime] = _utcnow

    async def aclose(self) -> None:
        await self.http.aclose()
        if self.ai_client is not None:
            await self.ai_client.aio.aclose()


def build_audit_context(settings: Settings) -> AuditContext:
    if not settings.google_gemini_api_key:
        logger.warning("GOOGLE_GEMINI_API_KEY not set — audits will use the fallback report")
    return AuditContext(
        settings=settings,
        http=httpx.AsyncClient(follow_redirects=True),
        ai_client=make_client(settings),
    )


async def perform_brand_audit(
    brand: BrandIdentity,
    responses: Sequence[QuestionnaireResponse],
    ctx: AuditContext,
) -> AuditResult:
    settings = ctx.settings
    url = normalize_url(brand.url)
    logger.info(f"Audit started for {brand.name!r} ({url})")

    try:
        crawl = await collect_technical_data(url, settings, ctx.http, sleep=ctx.sleep)
    except Exception as e:
        logger.exception(f"Technical scan crashed for {url}")
        crawl = unavailable(str(e)[:200])

    local_signals = build_technical_signals(crawl)
    formatted_answers = format_quiz_answers(responses, ctx.questions)

    def fallback() -> AuditResult:
        logger.info(f"Using fallback report for {brand.name!r}")
        return build_fallback_result(
            brand, responses, crawl, local_signals,
            formatted_answers=formatted_answers,
            generated_at=ctx.clock(),
        )

    if ctx.ai_client is None:
        return fallback()

    try:
        prompt = build_audit_prompt(brand, formatted_answers, crawl, settings.penalize_failed_scan)
        generated = await generate_report(prompt, settings, ctx.ai_client, sleep=ctx.sleep)
        if generated is None:
            return fallback()
        debug_log = DebugLog(
            psi_data=crawl,
            formatted_user_answers=formatted_answers,
            generated_at=ctx.clock(),
        )
        result = merge_report(brand, generated, local_signals, debug_log)
    except Exception:
        logger.exception(f"Audit pipeline failed for {brand.name!r}")
        return fallback()

    logger.info(f"Audit complete for {brand.name!r}: momentum={result.momentum_score}")
    return result
