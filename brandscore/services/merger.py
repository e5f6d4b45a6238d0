"""
Result merger — trusted local signals first, AI additions after, defaults
for anything the model left out.
"""
from typing import Iterable, List, Optional

from ..models import AuditResult, BrandIdentity, DebugLog, PerceptionGap, TechnicalSignal
from .ai_report import GeneratedReport

DEFAULT_MOMENTUM_SCORE = 60
DEFAULT_SUMMARY = "Audit Complete."


def normalize_label(label: str) -> str:
    """Dedup key: case-insensitive, whitespace-collapsed label."""
    return " ".join((label or "").casefold().split())


def merge_signals(
    local: Iterable[TechnicalSignal],
    ai_declared: Optional[Iterable[TechnicalSignal]],
) -> List[TechnicalSignal]:
    merged: List[TechnicalSignal] = []
    seen = set()
    for signal in local:
        key = normalize_label(signal.label)
        if key in seen:
            continue
        seen.add(key)
        merged.append(signal)
    for signal in ai_declared or []:
        key = normalize_label(signal.label)
        if key in seen:
            continue
        seen.add(key)
        merged.append(signal)
    return merged


def merge_report(
    brand: BrandIdentity,
    generated: GeneratedReport,
    local_signals: List[TechnicalSignal],
    debug_log: Optional[DebugLog] = None,
) -> AuditResult:
    payload = generated.payload
    return AuditResult(
        momentum_score=payload.momentum_score if payload.momentum_score is not None else DEFAULT_MOMENTUM_SCORE,
        business_context=payload.business_context or f"Analysis of {brand.name}",
        executive_summary=payload.executive_summary or DEFAULT_SUMMARY,
        technical_signals=merge_signals(local_signals, payload.technical_signals),
        categories=payload.categories or [],
        perception_gap=payload.perception_gap or PerceptionGap(detected=False, verdict="None", details=""),
        grounding_urls=list(generated.grounding_urls),
        debug_log=debug_log,
    )
