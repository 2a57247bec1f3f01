"""App publishing and detail routes.

Publishing responds as soon as the records are stored; the security audit is
queued as a background task and its outcome never affects the response.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel

from aura.audit import AuditOrchestrator, run_audit_in_background
from aura.catalog.projector import platforms_for, sort_versions
from aura.publish import AppUpload, PublishError, VersionUpload, publish_app, publish_version
from aura.schemas.models import App, Platform, SafetyBadge, SafetyState, Version
from aura.store import StoreRepository
from backend.deps import orchestrator_dep, store_dep

logger = logging.getLogger(__name__)
router = APIRouter()


class PublishResponse(BaseModel):
    app_id: str
    version_id: str
    safety: SafetyState
    badge: SafetyBadge


class AppDetailResponse(BaseModel):
    app: App
    versions: list[Version]
    safety: SafetyState
    badge: SafetyBadge


class AppSummary(BaseModel):
    app: App
    latest_version: Version | None = None
    total_downloads: int = 0
    badge: SafetyBadge = SafetyBadge.PENDING


def _publish_response(app_id: str, version: Version) -> PublishResponse:
    safety = SafetyState.for_version(version)
    return PublishResponse(app_id=app_id, version_id=version.version_id, safety=safety, badge=safety.badge)


@router.post("/apps", response_model=PublishResponse, status_code=status.HTTP_201_CREATED)
def create_app(
    upload: AppUpload,
    background_tasks: BackgroundTasks,
    store: StoreRepository = Depends(store_dep),
    orchestrator: AuditOrchestrator = Depends(orchestrator_dep),
):
    """Publish a new app with its first version, then audit it in the background."""
    try:
        app, version = publish_app(store, upload)
    except PublishError as e:
        logger.exception("Publish failed")
        raise HTTPException(status_code=500, detail=str(e)[:300])
    background_tasks.add_task(run_audit_in_background, orchestrator, app.app_id)
    return _publish_response(app.app_id, version)


@router.post("/apps/{app_id}/versions", response_model=PublishResponse, status_code=status.HTTP_201_CREATED)
def create_version(
    app_id: str,
    upload: VersionUpload,
    background_tasks: BackgroundTasks,
    store: StoreRepository = Depends(store_dep),
    orchestrator: AuditOrchestrator = Depends(orchestrator_dep),
):
    """Publish a further version of an existing app and audit it in the background."""
    try:
        version = publish_version(store, app_id, upload)
    except PublishError as e:
        logger.exception("Publish failed")
        raise HTTPException(status_code=500, detail=str(e)[:300])
    if version is None:
        raise HTTPException(status_code=404, detail=f"App not found: {app_id}")
    background_tasks.add_task(run_audit_in_background, orchestrator, app_id)
    return _publish_response(app_id, version)


@router.get("/apps", response_model=list[AppSummary])
def list_apps(
    platform: Optional[Platform] = None,
    store: StoreRepository = Depends(store_dep),
):
    """Storefront listing, newest apps first."""
    entries = store.list_apps(set(platforms_for(platform)) if platform else None)
    entries.sort(key=lambda e: (e.app.created_at, e.app.app_id), reverse=True)
    result = []
    for entry in entries:
        versions = sort_versions(entry.versions)
        latest = versions[0] if versions else None
        result.append(
            AppSummary(
                app=entry.app,
                latest_version=latest,
                total_downloads=sum(v.download_count for v in versions),
                badge=SafetyState.for_version(latest).badge,
            )
        )
    return result


@router.get("/apps/{app_id}", response_model=AppDetailResponse)
def get_app(app_id: str, store: StoreRepository = Depends(store_dep)):
    """App detail with versions (newest first) and the latest version's safety state."""
    app = store.get_app(app_id)
    if app is None:
        raise HTTPException(status_code=404, detail=f"App not found: {app_id}")
    versions = sort_versions(store.list_versions(app_id))
    safety = SafetyState.for_version(versions[0] if versions else None)
    return AppDetailResponse(app=app, versions=versions, safety=safety, badge=safety.badge)
