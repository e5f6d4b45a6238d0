"""
Lead capture: store the audit, build the shareable link, notify the CRM webhook.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import Field

from ..models import AuditResult, BrandIdentity, CamelModel, LeadInfo, QuestionnaireResponse
from ..services.crm_service import build_lead_payload, submit_lead
from ..services.magic_link import generate_magic_link
from ..utils.db_audits import save_audit, update_audit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Leads"])


class LeadRequest(CamelModel):
    lead: LeadInfo
    brand: BrandIdentity
    result: AuditResult
    responses: List[QuestionnaireResponse] = Field(default_factory=list)


class LeadResponse(CamelModel):
    success: bool
    report_url: str
    audit_id: Optional[str] = None


@router.post("/leads", response_model=LeadResponse)
async def capture_lead(req: LeadRequest, request: Request):
    ctx = request.app.state.audit_ctx
    settings = ctx.settings
    base_url = settings.app_url.rstrip("/")

    audit_id = None
    try:
        audit_id = await save_audit(req.brand, req.lead, req.result, req.responses)
    except Exception as e:
        logger.error(f"Failed to save audit for {req.brand.name!r}: {e}")

    if audit_id:
        report_url = f"{base_url}?id={audit_id}"
    else:
        report_url = generate_magic_link(base_url, req.brand, req.result) or base_url

    payload = build_lead_payload(req.lead, req.brand, req.result, req.responses, report_url)

    if audit_id:
        try:
            await update_audit(audit_id, report_url, req.result, req.responses, payload)
        except Exception as e:
            logger.warning(f"Failed to update report_url/crm data for {audit_id}: {e}")

    delivered = await submit_lead(payload, settings, ctx.http)
    return LeadResponse(success=delivered, report_url=report_url, audit_id=audit_id)
