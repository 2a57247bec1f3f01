"""Audit orchestrator: load subject, call the model, parse, normalize, persist.

Every invocation ends in exactly one ``AuditOutcome``; nothing here raises to
the caller. A failed audit leaves the stored verdict exactly as it was, so a
version that was pending stays pending. Concurrent audits of the same version
are not coordinated: whichever persist lands last wins.
"""

from __future__ import annotations

import asyncio
import logging
import time

from aura.audit.client import AuditClient
from aura.audit.verdict_parser import coerce_score, parse_verdict
from aura.llm.errors import ConfigurationMissing, RemoteFailure, RemoteRejected
from aura.schemas.audit import AuditOutcome, AuditStatus, FailureReason, ParseFailure
from aura.schemas.models import SUMMARY_FALLBACK, AppMetadata, Verdict
from aura.store.base import StoreError, StoreRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_FLAGS = 10
SUMMARY_MAX_CHARS = 1000
FLAG_MAX_CHARS = 200


def normalize_verdict(verdict: Verdict, max_flags: int = DEFAULT_MAX_FLAGS) -> Verdict:
    """Bound a parsed verdict before it is stored."""
    summary = verdict.summary.strip()[:SUMMARY_MAX_CHARS].strip() or SUMMARY_FALLBACK
    flags = [f.strip()[:FLAG_MAX_CHARS] for f in verdict.flags if f.strip()]
    return Verdict(
        score=coerce_score(verdict.score),
        summary=summary,
        flags=flags[:max(0, max_flags)],
    )


def _remote_reason(exc: RemoteFailure) -> FailureReason:
    if isinstance(exc, ConfigurationMissing):
        return FailureReason.CONFIGURATION_MISSING
    if isinstance(exc, RemoteRejected):
        return FailureReason.REMOTE_REJECTED
    return FailureReason.REMOTE_UNAVAILABLE


class AuditOrchestrator:
    """Runs one security audit against an app's latest version."""

    def __init__(self, store: StoreRepository, client: AuditClient, *, max_flags: int = DEFAULT_MAX_FLAGS):
        self._store = store
        self._client = client
        self._max_flags = max_flags

    def run(self, app_id: str) -> AuditOutcome:
        started = time.monotonic()
        outcome = self._run(app_id)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        if outcome.succeeded:
            logger.info(
                "Audit app=%s version=%s score=%d flags=%d (%d ms)",
                app_id, outcome.version_id, outcome.verdict.score, len(outcome.verdict.flags), elapsed_ms,
            )
        else:
            logger.warning(
                "Audit app=%s version=%s status=%s reason=%s (%d ms): %s",
                app_id, outcome.version_id, outcome.status.value,
                outcome.reason.value if outcome.reason else "-", elapsed_ms, outcome.detail,
            )
        return outcome

    async def arun(self, app_id: str) -> AuditOutcome:
        """Awaitable form; the blocking model call runs in a worker thread.

        If the awaiting task is cancelled the thread still finishes, and its
        single persist call either lands completely or not at all.
        """
        return await asyncio.to_thread(self.run, app_id)

    def _run(self, app_id: str) -> AuditOutcome:
        # LoadSubject
        try:
            app = self._store.get_app(app_id)
            version = self._store.get_latest_version(app_id) if app else None
        except StoreError as e:
            return AuditOutcome(
                status=AuditStatus.PERSIST_FAILED,
                app_id=app_id,
                reason=FailureReason.PERSIST_FAILED,
                detail=f"Could not load subject: {e}",
            )
        except Exception as e:
            logger.exception("Unexpected error loading app %s", app_id)
            return AuditOutcome(
                status=AuditStatus.PERSIST_FAILED,
                app_id=app_id,
                reason=FailureReason.PERSIST_FAILED,
                detail=f"Could not load subject: {e}",
            )
        if app is None:
            return self._not_found(app_id, "App not found")
        if version is None:
            return self._not_found(app_id, "No version found")

        # Invoke
        try:
            raw = self._client.audit(AppMetadata.from_app(app))
        except RemoteFailure as e:
            return AuditOutcome(
                status=AuditStatus.UNAVAILABLE,
                app_id=app_id,
                version_id=version.version_id,
                reason=_remote_reason(e),
                detail=str(e)[:500],
            )

        # Parse
        parsed = parse_verdict(raw)
        if isinstance(parsed, ParseFailure):
            return AuditOutcome(
                status=AuditStatus.UNAVAILABLE,
                app_id=app_id,
                version_id=version.version_id,
                reason=parsed.reason,
                detail="Model returned no JSON object",
                raw_reply=parsed.raw,
            )

        # Normalize + Persist
        verdict = normalize_verdict(parsed, self._max_flags)
        try:
            self._store.update_verdict(version.version_id, verdict)
        except StoreError as e:
            return AuditOutcome(
                status=AuditStatus.PERSIST_FAILED,
                app_id=app_id,
                version_id=version.version_id,
                reason=FailureReason.PERSIST_FAILED,
                detail=str(e)[:500],
            )
        return AuditOutcome(
            status=AuditStatus.SUCCESS,
            app_id=app_id,
            version_id=version.version_id,
            verdict=verdict,
        )

    @staticmethod
    def _not_found(app_id: str, detail: str) -> AuditOutcome:
        return AuditOutcome(
            status=AuditStatus.NOT_FOUND,
            app_id=app_id,
            reason=FailureReason.SUBJECT_NOT_FOUND,
            detail=detail,
        )


def run_audit_in_background(orchestrator: AuditOrchestrator, app_id: str) -> None:
    """Fire-and-continue entry point for the publish flow.

    Publishing has already completed; any failure here is logged and the
    version simply stays pending.
    """
    try:
        orchestrator.run(app_id)
    except Exception:
        logger.exception("Background audit crashed for app %s", app_id)
