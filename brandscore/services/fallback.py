"""
Fallback synthesizer — a deterministic report built from quiz answers and
whatever the technical scan produced. No I/O, cannot fail.
"""
import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..models import (
    AuditResult, BrandIdentity, CategoryAnalysis, DebugLog, PerceptionGap,
    QuestionCategory, QuestionnaireResponse, TechnicalCrawlData, TechnicalSignal,
)

DEFAULT_QUESTION_COUNT = 16


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def quiz_score(responses: Sequence[QuestionnaireResponse]) -> int:
    """Share of answers equal to 1, as 0-100. An empty quiz counts as 16 unanswered."""
    yes = sum(1 for r in responses if r.answer == 1)
    total = len(responses) or DEFAULT_QUESTION_COUNT
    return max(0, min(100, round_half_up(yes / total * 100)))


def fallback_momentum(responses: Sequence[QuestionnaireResponse], crawl: TechnicalCrawlData) -> int:
    quiz = quiz_score(responses)
    if crawl.success and crawl.perf_score >= 0:
        return round_half_up((crawl.perf_score + quiz) / 2)
    return quiz


def _categories(crawl: TechnicalCrawlData) -> List[CategoryAnalysis]:
    scanned = crawl.success and crawl.perf_score >= 0
    return [
        CategoryAnalysis(
            title=QuestionCategory.STRATEGY, score=70,
            diagnostic="Strategy analysis based on your answers.",
            evidence=["User inputs reviewed"],
            strategy="Review your marketing budget and customer data practices.",
        ),
        CategoryAnalysis(
            title=QuestionCategory.OPERATIONS, score=60,
            diagnostic="Operational efficiency check.",
            evidence=["Self-reported data"],
            strategy="Implement a CRM to track leads automatically.",
        ),
        CategoryAnalysis(
            title=QuestionCategory.VISUALS, score=75,
            diagnostic="Visual impact assessment.",
            evidence=["Website active"],
            strategy="Make sure your brand design builds trust on the first screen.",
        ),
        CategoryAnalysis(
            title=QuestionCategory.CONTENT, score=55,
            diagnostic="Content strategy needs review.",
            evidence=["Social presence check"],
            strategy="Develop a 12-month content calendar.",
        ),
        CategoryAnalysis(
            title=QuestionCategory.GROWTH, score=65,
            diagnostic="Growth engine health check.",
            evidence=["Ads status unknown"],
            strategy="Track your cost per lead (CPL) on every channel.",
        ),
        CategoryAnalysis(
            title=QuestionCategory.SEO,
            score=crawl.perf_score if scanned else 50,
            diagnostic="Your website speed affects ranking." if scanned else "Technical SEO check required.",
            evidence=[f"Load time (LCP): {crawl.web_vitals.lcp}"] if scanned else ["Scan unavailable"],
            strategy="Ask a developer to run a deep technical audit.",
        ),
    ]


def build_fallback_result(
    brand: BrandIdentity,
    responses: Sequence[QuestionnaireResponse],
    crawl: TechnicalCrawlData,
    local_signals: List[TechnicalSignal],
    formatted_answers: str = "",
    generated_at: Optional[datetime] = None,
) -> AuditResult:
    quiz = quiz_score(responses)
    scanned = crawl.success and crawl.perf_score >= 0
    if scanned:
        summary = (
            f"Your technical foundation ({crawl.perf_score}/100 mobile speed) is measurable, "
            f"but your strategy needs alignment."
        )
    else:
        summary = (
            f"We've analyzed your answers. Your operational and strategic foundation "
            f"scores {quiz}/100 based on your inputs."
        )

    return AuditResult(
        momentum_score=fallback_momentum(responses, crawl),
        business_context=f"We identified {brand.name} as a potential market entrant.",
        executive_summary=summary,
        technical_signals=list(local_signals),
        categories=_categories(crawl),
        perception_gap=PerceptionGap(detected=False, verdict="Inconclusive", details="Manual review recommended."),
        grounding_urls=[],
        debug_log=DebugLog(
            psi_data=crawl,
            formatted_user_answers=formatted_answers,
            generated_at=generated_at or datetime.now(timezone.utc),
        ),
    )
