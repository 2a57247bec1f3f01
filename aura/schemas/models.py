"""Pydantic models: single source of truth for App, Version, Verdict and the safety state shown to users."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

SUMMARY_FALLBACK = "Analysis completed."
SCORE_MIN = 0
SCORE_MAX = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class Platform(str, Enum):
    ANDROID = "ANDROID"
    IOS = "IOS"
    BOTH = "BOTH"


class Category(str, Enum):
    PRODUCTIVITY = "Productivity"
    GAMES = "Games"
    SOCIAL = "Social"
    ENTERTAINMENT = "Entertainment"
    LIFESTYLE = "Lifestyle"
    DEVELOPER_TOOLS = "Developer Tools"


class Verdict(BaseModel):
    """Bounded safety assessment attached to a Version."""

    score: int = Field(ge=SCORE_MIN, le=SCORE_MAX)
    summary: str = Field(min_length=1)
    flags: list[str] = Field(default_factory=list)


class App(BaseModel):
    """A published app. `developer_name` is filled by the storage join."""

    app_id: str
    title: str
    description: str | None = ""
    # Plain string: stored rows may predate the current Category enum
    category: str = Category.PRODUCTIVITY.value
    platform: Platform = Platform.ANDROID
    developer_id: str = ""
    developer_name: str | None = None
    icon_url: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class Version(BaseModel):
    """One uploaded package of an App. Only download_count and verdict change after creation."""

    version_id: str
    app_id: str
    version_string: str | None = "1.0.0"
    file_url: str | None = None
    file_size_bytes: int | None = 0
    download_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    verdict: Verdict | None = None

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class AppWithVersions(BaseModel):
    """App joined with all of its versions (unordered, as stored)."""

    app: App
    versions: list[Version] = []


class AppMetadata(BaseModel):
    """The subset of an App that is sent to the auditing model."""

    title: str
    description: str = ""
    category: str = ""
    developer_name: str = "Unknown"

    @classmethod
    def from_app(cls, app: App) -> "AppMetadata":
        return cls(
            title=app.title,
            description=app.description or "",
            category=app.category or "",
            developer_name=app.developer_name or "Unknown",
        )


# ---------------------------------------------------------------------------
# Safety state: what the storefront renders for a version
# ---------------------------------------------------------------------------

class SafetyStatus(str, Enum):
    PENDING = "pending"
    SCORED = "scored"
    UNAVAILABLE = "unavailable"


class SafetyBadge(str, Enum):
    PENDING = "pending"
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"


def badge_for_score(score: int | None) -> SafetyBadge:
    if score is None:
        return SafetyBadge.PENDING
    if score > 80:
        return SafetyBadge.SAFE
    if score > 50:
        return SafetyBadge.CAUTION
    return SafetyBadge.WARNING


class SafetyState(BaseModel):
    """Tagged verdict state: pending, scored(verdict) or unavailable(reason).

    A missing verdict is always ``pending``; it is never shown as a number.
    """

    status: SafetyStatus = SafetyStatus.PENDING
    verdict: Verdict | None = None
    reason: str | None = None

    @property
    def badge(self) -> SafetyBadge:
        if self.status is SafetyStatus.SCORED and self.verdict is not None:
            return badge_for_score(self.verdict.score)
        return SafetyBadge.PENDING

    @classmethod
    def pending(cls) -> "SafetyState":
        return cls(status=SafetyStatus.PENDING)

    @classmethod
    def scored(cls, verdict: Verdict) -> "SafetyState":
        return cls(status=SafetyStatus.SCORED, verdict=verdict)

    @classmethod
    def unavailable(cls, reason: str) -> "SafetyState":
        return cls(status=SafetyStatus.UNAVAILABLE, reason=reason)

    @classmethod
    def for_version(cls, version: Version | None) -> "SafetyState":
        if version is None or version.verdict is None:
            return cls.pending()
        return cls.scored(version.verdict)
