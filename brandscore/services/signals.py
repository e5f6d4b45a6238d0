"""
Signal formatter — crawl data and quiz answers into report signals and prompt text.
"""
from typing import Iterable, List, Optional

from ..models import (
    Question, QuestionnaireResponse, QuestionType, SignalStatus,
    TechnicalCrawlData, TechnicalSignal,
)
from ..questions import QUESTIONS, catalog_by_id


def _tiered(score: int, good: int, warning: int) -> SignalStatus:
    if score >= good:
        return SignalStatus.GOOD
    if score >= warning:
        return SignalStatus.WARNING
    return SignalStatus.CRITICAL


def build_technical_signals(crawl: TechnicalCrawlData) -> List[TechnicalSignal]:
    """Locally measured signals. These always lead the final report."""
    if not crawl.success:
        # The scanning path failed, not the brand: warning, never critical.
        return [TechnicalSignal(label="Website Scan", value="Scan unavailable", status=SignalStatus.WARNING)]

    signals = [
        TechnicalSignal(
            label="Mobile Speed",
            value=f"{crawl.perf_score}/100",
            status=_tiered(crawl.perf_score, good=90, warning=50),
        ),
        TechnicalSignal(
            label="SEO Score",
            value=f"{crawl.seo_score}/100",
            status=_tiered(crawl.seo_score, good=90, warning=70),
        ),
        TechnicalSignal(
            label="Tech Stack",
            value=", ".join(crawl.tech_stack) if crawl.tech_stack else "Not detected",
            status=SignalStatus.GOOD if crawl.tech_stack else SignalStatus.WARNING,
        ),
    ]
    if crawl.bugs:
        signals.append(TechnicalSignal(
            label="Critical Issues",
            value=f"{len(crawl.bugs)} detected: {', '.join(crawl.bugs)}",
            status=SignalStatus.CRITICAL,
        ))
    return signals


def _answer_label(question: Optional[Question], answer: int) -> str:
    if question is not None and question.type == QuestionType.SCALE:
        return str(answer)
    return "YES" if answer == 1 else "NO"


def format_quiz_answers(
    responses: Iterable[QuestionnaireResponse],
    questions: List[Question] = QUESTIONS,
) -> str:
    """One prompt line per response: - [Category] "question": YES|NO|<n>"""
    catalog = catalog_by_id(questions)
    lines = []
    for r in responses:
        q = catalog.get(r.question_id)
        category = q.category.value if q else "Unknown"
        text = q.text if q else f"Question {r.question_id}"
        lines.append(f'- [{category}] "{text}": {_answer_label(q, r.answer)}')
    return "\n".join(lines)


def format_technical_findings(crawl: TechnicalCrawlData, penalize_failed_scan: bool = False) -> str:
    """Metric block injected into the prompt; explicit UNAVAILABLE markers on failure."""
    if not crawl.success:
        if penalize_failed_scan:
            marker = "UNAVAILABLE (the site could not be scanned; treat this as a weakness)"
        else:
            marker = "UNAVAILABLE (scan failed on our side; do not penalize the score)"
        return "\n".join([
            f"- Mobile Performance Score: {marker}",
            f"- SEO Score: {marker}",
            "- Core Web Vitals: UNAVAILABLE",
            "- Tech Stack: Unknown",
            "- Critical Issues: Unknown",
        ])

    vitals = crawl.web_vitals
    return "\n".join([
        f"- Mobile Performance Score: {crawl.perf_score}/100",
        f"- SEO Score: {crawl.seo_score}/100",
        f"- Core Web Vitals: LCP {vitals.lcp}, CLS {vitals.cls}, FCP {vitals.fcp}",
        f"- Tech Stack: {', '.join(crawl.tech_stack) or 'Not detected'}",
        f"- Critical Issues: {', '.join(crawl.bugs) or 'None detected'}",
    ])
