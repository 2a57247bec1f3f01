"""Publish flow: record a new app or version. Auditing is scheduled by the caller, never awaited here."""

from __future__ import annotations

import logging
import uuid

from pydantic import BaseModel, Field

from aura.schemas.models import App, Category, Platform, Version
from aura.store.base import StoreError, StoreRepository

logger = logging.getLogger(__name__)


class VersionUpload(BaseModel):
    """A package already placed in object storage."""

    version_string: str = "1.0.0"
    file_url: str = Field(min_length=1)
    file_size_bytes: int = Field(default=0, ge=0)


class AppUpload(VersionUpload):
    developer_id: str = Field(min_length=1)
    developer_name: str | None = None
    title: str = Field(min_length=1)
    description: str = ""
    category: Category = Category.PRODUCTIVITY
    platform: Platform = Platform.ANDROID
    icon_url: str | None = None


class PublishError(Exception):
    """The app or version could not be recorded."""


def _new_id() -> str:
    return str(uuid.uuid4())


def publish_app(store: StoreRepository, upload: AppUpload) -> tuple[App, Version]:
    """Create the app and its first version."""
    try:
        if upload.developer_name:
            store.upsert_developer(upload.developer_id, upload.developer_name)
        app = store.create_app(
            App(
                app_id=_new_id(),
                title=upload.title.strip(),
                description=upload.description.strip(),
                category=upload.category.value,
                platform=upload.platform,
                developer_id=upload.developer_id,
                icon_url=upload.icon_url,
            )
        )
        version = store.create_version(
            Version(
                version_id=_new_id(),
                app_id=app.app_id,
                version_string=upload.version_string.strip() or "1.0.0",
                file_url=upload.file_url,
                file_size_bytes=upload.file_size_bytes,
            )
        )
    except StoreError as e:
        raise PublishError(f"Failed to save app: {e}") from e
    logger.info("Published app %s (%s) version %s", app.app_id, app.platform.value, version.version_string)
    return app, version


def publish_version(store: StoreRepository, app_id: str, upload: VersionUpload) -> Version | None:
    """Add a version to an existing app. Returns None if the app does not exist."""
    if store.get_app(app_id) is None:
        return None
    try:
        version = store.create_version(
            Version(
                version_id=_new_id(),
                app_id=app_id,
                version_string=upload.version_string.strip() or "1.0.0",
                file_url=upload.file_url,
                file_size_bytes=upload.file_size_bytes,
            )
        )
    except StoreError as e:
        raise PublishError(f"Failed to save version: {e}") from e
    logger.info("Published version %s of app %s", version.version_string, app_id)
    return version
