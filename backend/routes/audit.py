"""Audit API routes: manual (re-)analysis of an app's latest version."""

import logging

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from aura.audit import AuditOrchestrator
from aura.schemas.audit import AuditStatus, FailureReason
from aura.schemas.models import SafetyState, Verdict
from backend.deps import orchestrator_dep

logger = logging.getLogger(__name__)
router = APIRouter()


class AuditRequest(BaseModel):
    app_id: str


class AuditResponse(BaseModel):
    status: AuditStatus
    app_id: str
    version_id: str | None = None
    verdict: Verdict | None = None
    safety: SafetyState
    reason: FailureReason | None = None
    detail: str | None = None
    raw_reply: str | None = None


_STATUS_CODES = {
    AuditStatus.SUCCESS: status.HTTP_200_OK,
    AuditStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuditStatus.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuditStatus.PERSIST_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post("/audit", response_model=AuditResponse)
async def run_audit(
    request: AuditRequest,
    response: Response,
    orchestrator: AuditOrchestrator = Depends(orchestrator_dep),
):
    """Run the security audit for an app's latest version and persist the verdict."""
    outcome = await orchestrator.arun(request.app_id)
    code = _STATUS_CODES.get(outcome.status, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if outcome.reason is FailureReason.CONFIGURATION_MISSING:
        # Deployment problem, not a transient outage
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    response.status_code = code
    return AuditResponse(
        status=outcome.status,
        app_id=outcome.app_id,
        version_id=outcome.version_id,
        verdict=outcome.verdict,
        safety=outcome.safety_state(),
        reason=outcome.reason,
        detail=outcome.detail,
        raw_reply=outcome.raw_reply,
    )
