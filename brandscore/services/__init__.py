from .audit import AuditContext, build_audit_context, perform_brand_audit
from .pagespeed import collect_technical_data
from .ai_report import generate_report, decode_report
from .fallback import build_fallback_result
from .merger import merge_report, merge_signals
