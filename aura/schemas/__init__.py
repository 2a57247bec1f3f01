"""Pydantic models: single source of truth for all data shapes."""

from aura.schemas.audit import AuditOutcome, AuditStatus, FailureReason, ParseFailure
from aura.schemas.catalog import CatalogApp, CatalogDocument, CatalogVersion
from aura.schemas.models import (
    App,
    AppMetadata,
    AppWithVersions,
    Category,
    Platform,
    SafetyBadge,
    SafetyState,
    SafetyStatus,
    Verdict,
    Version,
)

__all__ = [
    "App",
    "AppMetadata",
    "AppWithVersions",
    "AuditOutcome",
    "AuditStatus",
    "CatalogApp",
    "CatalogDocument",
    "CatalogVersion",
    "Category",
    "FailureReason",
    "ParseFailure",
    "Platform",
    "SafetyBadge",
    "SafetyState",
    "SafetyStatus",
    "Verdict",
    "Version",
]
