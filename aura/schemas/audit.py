"""Audit pipeline result shapes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from aura.schemas.models import SafetyState, Verdict


class FailureReason(str, Enum):
    """Why an audit did not produce a verdict. Kept distinct for diagnostics."""

    CONFIGURATION_MISSING = "configuration_missing"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    REMOTE_REJECTED = "remote_rejected"
    MALFORMED_REPLY = "malformed_reply"
    SUBJECT_NOT_FOUND = "subject_not_found"
    PERSIST_FAILED = "persist_failed"


class ParseFailure(BaseModel):
    """The model reply held no recoverable JSON object."""

    reason: FailureReason = FailureReason.MALFORMED_REPLY
    raw: str = ""


class AuditStatus(str, Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    PERSIST_FAILED = "persist_failed"


class AuditOutcome(BaseModel):
    """Terminal result of one orchestrator invocation."""

    status: AuditStatus
    app_id: str
    version_id: str | None = None
    verdict: Verdict | None = None
    reason: FailureReason | None = None
    detail: str | None = None
    raw_reply: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is AuditStatus.SUCCESS

    def safety_state(self) -> SafetyState:
        if self.status is AuditStatus.SUCCESS and self.verdict is not None:
            return SafetyState.scored(self.verdict)
        if self.reason is not None and self.status is AuditStatus.UNAVAILABLE:
            return SafetyState.unavailable(self.reason.value)
        return SafetyState.pending()
