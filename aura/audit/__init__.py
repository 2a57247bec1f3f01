"""Security audit: prompt + model call, verdict parsing, orchestration."""

from aura.audit.client import AuditClient, build_prompt
from aura.audit.orchestrator import AuditOrchestrator, normalize_verdict, run_audit_in_background
from aura.audit.verdict_parser import parse_verdict

__all__ = [
    "AuditClient",
    "AuditOrchestrator",
    "build_prompt",
    "normalize_verdict",
    "parse_verdict",
    "run_audit_in_background",
]
