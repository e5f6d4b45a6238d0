"""
Brand Score audit endpoints — question catalog and the audit itself.
"""
from typing import List

from fastapi import APIRouter, Request
from pydantic import Field

from ..models import AuditResult, BrandIdentity, CamelModel, Question, QuestionnaireResponse
from ..questions import QUESTIONS
from ..services.audit import perform_brand_audit

router = APIRouter(prefix="/api", tags=["Audit"])


class AuditRequest(CamelModel):
    brand: BrandIdentity
    responses: List[QuestionnaireResponse] = Field(default_factory=list)


@router.get("/questions", response_model=List[Question])
async def list_questions():
    return QUESTIONS


@router.post("/audit", response_model=AuditResult)
async def run_audit(req: AuditRequest, request: Request):
    """Always answers 200 with a complete report; provider trouble degrades to the fallback."""
    ctx = request.app.state.audit_ctx
    return await perform_brand_audit(req.brand, req.responses, ctx)
