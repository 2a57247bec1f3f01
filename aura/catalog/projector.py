"""Project stored apps/versions into the AltStore source feed.

Pure functions over already-loaded records. Generation is total: a bad field
in one record degrades to a default instead of failing the document, and the
same input always renders to the same bytes.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from aura.schemas.catalog import CatalogApp, CatalogDocument, CatalogVersion
from aura.schemas.models import App, AppWithVersions, Category, Platform, Version, as_utc

logger = logging.getLogger(__name__)

SUBTITLE_MAX_CHARS = 80
BUILD_VERSION = "1"
DEFAULT_VERSION_STRING = "1.0.0"
DEFAULT_CATEGORY = "other"
UNKNOWN_DEVELOPER = "Unknown"

# Internal category -> AltStore category. Every Category member must appear here.
CATEGORY_MAP: dict[str, str] = {
    Category.PRODUCTIVITY.value: "utilities",
    Category.GAMES.value: "games",
    Category.SOCIAL.value: "social",
    Category.ENTERTAINMENT.value: "entertainment",
    Category.LIFESTYLE.value: "lifestyle",
    Category.DEVELOPER_TOOLS.value: "developer",
}

# Which stored platforms a given installer can consume
PLATFORM_FILTERS: dict[Platform, frozenset[Platform]] = {
    Platform.IOS: frozenset({Platform.IOS, Platform.BOTH}),
    Platform.ANDROID: frozenset({Platform.ANDROID, Platform.BOTH}),
    Platform.BOTH: frozenset(Platform),
}


def platforms_for(platform: Platform | None) -> frozenset[Platform]:
    if platform is None:
        return frozenset(Platform)
    return PLATFORM_FILTERS.get(platform, frozenset(Platform))


def map_category(category: str | None) -> str:
    return CATEGORY_MAP.get(category or "", DEFAULT_CATEGORY)


def bundle_identifier(app_id: str, prefix: str = "com.aura.store") -> str:
    """Stable external identifier for an app.

    Canonical UUID ids (lowercase, dashed) keep their hex digits
    (``com.aura.store.<32 hex>``). Any other spelling, including other forms
    of a UUID, is hashed and tagged with ``x`` so distinct ids never share an
    identifier.
    """
    app_id = str(app_id)
    try:
        parsed = uuid.UUID(app_id)
    except ValueError:
        parsed = None
    if parsed is not None and str(parsed) == app_id:
        token = parsed.hex
    else:
        token = "x" + hashlib.sha256(app_id.encode("utf-8")).hexdigest()[:32]
    return f"{prefix}.{token}"


def sort_versions(versions: list[Version]) -> list[Version]:
    """Newest first; identical timestamps ordered by version_id (descending)."""
    return sorted(versions, key=lambda v: (as_utc(v.created_at), v.version_id), reverse=True)


def project_version(version: Version) -> CatalogVersion:
    return CatalogVersion(
        version=version.version_string or DEFAULT_VERSION_STRING,
        build_version=BUILD_VERSION,
        date=as_utc(version.created_at).date().isoformat(),
        download_url=version.file_url or "",
        size=max(0, version.file_size_bytes or 0),
    )


def project_app(app: App, versions: list[Version], bundle_prefix: str = "com.aura.store") -> CatalogApp:
    description = app.description or ""
    return CatalogApp(
        name=app.title or "",
        bundle_identifier=bundle_identifier(app.app_id, bundle_prefix),
        developer_name=app.developer_name or UNKNOWN_DEVELOPER,
        subtitle=description[:SUBTITLE_MAX_CHARS],
        localized_description=description,
        icon_url=app.icon_url or "",
        category=map_category(app.category),
        versions=tuple(project_version(v) for v in sort_versions(versions)),
    )


def project_catalog(
    entries: list[AppWithVersions],
    platform: Platform | None = Platform.IOS,
    *,
    name: str = "Aura Store",
    identifier: str = "com.aura.store",
    subtitle: str = "The Open App Market",
    description: str = "Discover and download apps for iOS.",
    bundle_prefix: str = "com.aura.store",
) -> CatalogDocument:
    """Build the feed for *platform*. Apps without versions keep an empty version list."""
    allowed = platforms_for(platform)
    selected = [e for e in entries if e.app.platform in allowed]
    selected.sort(key=lambda e: (as_utc(e.app.created_at), e.app.app_id), reverse=True)
    apps = []
    for entry in selected:
        versions = [v for v in entry.versions if v.app_id == entry.app.app_id]
        apps.append(project_app(entry.app, versions, bundle_prefix))
    logger.debug("Projected %d of %d apps for platform %s", len(apps), len(entries), platform)
    return CatalogDocument(
        name=name,
        identifier=identifier,
        subtitle=subtitle,
        description=description,
        apps=tuple(apps),
        news=(),
    )


def render_catalog(document: CatalogDocument) -> str:
    """Serialize with installer field names. Byte-identical for identical documents."""
    return document.model_dump_json(by_alias=True)
