"""
brandscore/utils/db_audits.py — persistence for completed audits and leads.
Automatically falls back to an in-memory dict when MongoDB is unavailable.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from brandscore.database import get_db
from brandscore.models import AuditResult, BrandIdentity, LeadInfo, QuestionnaireResponse

_mem: dict = {}  # in-memory fallback


def _clean(doc: dict) -> dict:
    if doc and "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def _report_data(result: AuditResult, responses: Sequence[QuestionnaireResponse], crm: Optional[dict] = None) -> dict:
    data = {
        "result": result.model_dump(mode="json", by_alias=True),
        "quizResponses": [r.model_dump(mode="json", by_alias=True) for r in responses],
        "meta": {"source": "web_app", "version": "1.0"},
    }
    if crm is not None:
        data["crm"] = crm
    return data


async def save_audit(
    brand: BrandIdentity,
    lead: LeadInfo,
    result: AuditResult,
    responses: Sequence[QuestionnaireResponse],
) -> str:
    audit_id = str(uuid.uuid4())
    doc = {
        "audit_id": audit_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "brand_name": brand.name,
        "brand_url": brand.url,
        "lead_first_name": lead.first_name,
        "lead_last_name": lead.last_name,
        "lead_email": lead.email,
        "lead_phone": lead.phone,
        "lead_position": lead.position,
        "lead_revenue": lead.revenue,
        "lead_company_size": lead.company_size,
        "score": result.momentum_score,
        "report_url": None,
        "report_data": _report_data(result, responses),
    }
    db = get_db()
    if db is not None:
        await db.brand_audits.insert_one(doc)
    else:
        _mem[audit_id] = doc
    return audit_id


async def update_audit(
    audit_id: str,
    report_url: str,
    result: AuditResult,
    responses: Sequence[QuestionnaireResponse],
    crm: Dict[str, Any],
) -> bool:
    changes = {"report_url": report_url, "report_data": _report_data(result, responses, crm)}
    db = get_db()
    if db is not None:
        res = await db.brand_audits.update_one({"audit_id": audit_id}, {"$set": changes})
        return res.matched_count > 0
    if audit_id not in _mem:
        return False
    _mem[audit_id].update(changes)
    return True


async def get_audit_record(audit_id: str) -> Optional[dict]:
    db = get_db()
    if db is not None:
        doc = await db.brand_audits.find_one({"audit_id": audit_id})
        return _clean(doc) if doc else None
    return _mem.get(audit_id)


async def get_audit(audit_id: str) -> Optional[dict]:
    """Stored audit in app shape: {brand, result, lead}."""
    doc = await get_audit_record(audit_id)
    if not doc:
        return None
    lead = LeadInfo(
        first_name=doc.get("lead_first_name") or "",
        last_name=doc.get("lead_last_name") or "",
        position=doc.get("lead_position") or "",
        email=doc.get("lead_email") or "",
        phone=doc.get("lead_phone") or "",
        revenue=doc.get("lead_revenue") or "",
        company_size=doc.get("lead_company_size") or "",
    )
    lead.full_name = lead.display_name
    return {
        "brand": BrandIdentity(name=doc["brand_name"], url=doc["brand_url"]),
        "result": AuditResult.model_validate(doc["report_data"]["result"]),
        "lead": lead,
    }
