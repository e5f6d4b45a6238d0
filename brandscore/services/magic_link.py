"""
Shareable report links: the whole report travels in the query string (?r=...).
Debug data is stripped to keep the URL short.
"""
import base64
import binascii
import json
import logging
from typing import Tuple

from pydantic import ValidationError

from ..models import AuditResult, BrandIdentity

logger = logging.getLogger(__name__)


def encode_report(brand: BrandIdentity, result: AuditResult) -> str:
    payload = {
        "brand": brand.model_dump(mode="json", by_alias=True),
        "result": result.model_dump(mode="json", by_alias=True, exclude={"debug_log"}),
    }
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_magic_link(base_url: str, brand: BrandIdentity, result: AuditResult) -> str:
    try:
        return f"{base_url.rstrip('/')}?r={encode_report(brand, result)}"
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to generate magic link: {e}")
        return ""


def decode_magic_link(token: str) -> Tuple[BrandIdentity, AuditResult]:
    """Inverse of encode_report. Accepts standard or URL-safe base64, padded or not."""
    token = (token or "").strip().replace("+", "-").replace("/", "_").replace(" ", "-")
    token += "=" * (-len(token) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(token).decode("utf-8"))
        return BrandIdentity.model_validate(data["brand"]), AuditResult.model_validate(data["result"])
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        raise ValueError(f"Invalid report link: {e}") from e
