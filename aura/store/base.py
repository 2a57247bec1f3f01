"""Storage collaborator interface (Protocol) for apps, versions and verdicts."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from aura.schemas.models import App, AppWithVersions, Platform, Verdict, Version, as_utc


class StoreError(Exception):
    """Storage backend failed to read or write a record."""


def latest_version(versions: list[Version]) -> Version | None:
    """Most recently created version; identical timestamps fall back to version_id.

    Naive timestamps compare as UTC.
    """
    if not versions:
        return None
    return max(versions, key=lambda v: (as_utc(v.created_at), v.version_id))


@runtime_checkable
class StoreRepository(Protocol):
    """
    Row-granular storage operations. Each call is atomic on its own; callers
    get no transaction spanning several calls.
    """

    def upsert_developer(self, developer_id: str, username: str) -> None:
        ...

    def create_app(self, app: App) -> App:
        ...

    def create_version(self, version: Version) -> Version:
        ...

    def get_app(self, app_id: str) -> App | None:
        """App with ``developer_name`` joined from the owner's profile."""
        ...

    def get_version(self, version_id: str) -> Version | None:
        ...

    def get_latest_version(self, app_id: str) -> Version | None:
        ...

    def list_versions(self, app_id: str) -> list[Version]:
        ...

    def list_apps(self, platforms: set[Platform] | None = None) -> list[AppWithVersions]:
        """All apps (optionally restricted to *platforms*) with their versions attached."""
        ...

    def update_verdict(self, version_id: str, verdict: Verdict) -> None:
        """Overwrite score, summary and flags of one version in a single write.

        Raises StoreError if the version does not exist or the write fails.
        """
        ...

    def increment_downloads(self, version_id: str) -> Version | None:
        ...
