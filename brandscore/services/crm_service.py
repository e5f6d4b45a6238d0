"""
brandscore/services/crm_service.py
Forwards a captured lead (plus report scores and link) to the CRM/email
automation webhook. Delivery problems are logged, never raised.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import Settings
from ..models import (
    AuditResult, BrandIdentity, LeadInfo, Question, QuestionCategory,
    QuestionnaireResponse, QuestionType,
)
from ..questions import QUESTIONS, catalog_by_id

logger = logging.getLogger(__name__)


def format_quiz_data(
    responses: Sequence[QuestionnaireResponse],
    questions: List[Question] = QUESTIONS,
) -> List[Dict[str, str]]:
    catalog = catalog_by_id(questions)
    rows = []
    for r in responses:
        q = catalog.get(r.question_id)
        answer = str(r.answer)
        if q is not None and q.type == QuestionType.BOOLEAN:
            answer = "Yes" if r.answer == 1 else "No"
        rows.append({
            "category": q.category.value if q else "Unknown",
            "question": q.text if q else f"Question {r.question_id}",
            "answer": answer,
        })
    return rows


def _category_score(result: AuditResult, category: QuestionCategory) -> int:
    return next((c.score for c in result.categories if c.title == category), 0)


def build_lead_payload(
    lead: LeadInfo,
    brand: BrandIdentity,
    result: AuditResult,
    responses: Sequence[QuestionnaireResponse],
    report_link: str,
    captured_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "capturedAt": (captured_at or datetime.now(timezone.utc)).isoformat(),
        "lead": {
            "name": lead.display_name,
            "email": lead.email,
            "phone": lead.phone,
            "position": lead.position,
            "revenue": lead.revenue,
            "companySize": lead.company_size,
        },
        "brand": {"name": brand.name, "url": brand.url},
        "scores": {
            "total": result.momentum_score,
            "strategy": _category_score(result, QuestionCategory.STRATEGY),
            "growth": _category_score(result, QuestionCategory.GROWTH),
            "visuals": _category_score(result, QuestionCategory.VISUALS),
        },
        "report_link": report_link,
        "summary": result.executive_summary,
        "quiz_data": format_quiz_data(responses),
    }


async def submit_lead(payload: Dict[str, Any], settings: Settings, client: httpx.AsyncClient) -> bool:
    """POST the payload to WEBHOOK_URL. Returns False only when delivery was attempted and failed."""
    if not settings.webhook_url:
        logger.warning(f"WEBHOOK_URL not configured — lead submission skipped (report: {payload.get('report_link')})")
        return True

    try:
        resp = await client.post(
            settings.webhook_url,
            content=json.dumps(payload, default=str),
            # text/plain keeps Zapier-style catch hooks happy (no preflight)
            headers={"Content-Type": "text/plain"},
            timeout=settings.webhook_timeout_seconds,
        )
        resp.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"CRM submission error: {e}")
        return False

    logger.info(f"Lead submitted to webhook for {payload.get('brand', {}).get('name')}")
    return True
