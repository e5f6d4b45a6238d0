"""
Report retrieval — by stored id or by magic-link token.
"""
from fastapi import APIRouter, HTTPException, Query

from ..services.magic_link import decode_magic_link
from ..utils.db_audits import get_audit

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/restore")
async def restore_report(r: str = Query(..., min_length=4, description="Magic-link token")):
    try:
        brand, result = decode_magic_link(r)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "brand": brand.model_dump(mode="json", by_alias=True),
        "result": result.model_dump(mode="json", by_alias=True),
    }


@router.get("/{audit_id}")
async def get_report(audit_id: str):
    audit = await get_audit(audit_id)
    if not audit:
        raise HTTPException(status_code=404, detail="Report not found")
    return {key: value.model_dump(mode="json", by_alias=True) for key, value in audit.items()}
