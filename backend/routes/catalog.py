"""Catalog feed routes: AltStore source document, regenerated per request."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from aura.catalog import build_catalog, render_catalog
from aura.config import Settings
from aura.schemas.models import Platform
from aura.store import StoreRepository
from backend.deps import settings_dep, store_dep

logger = logging.getLogger(__name__)
router = APIRouter()


def _feed_response(body: str, settings: Settings) -> Response:
    return Response(
        content=body,
        media_type="application/json",
        headers={"Cache-Control": f"public, max-age={settings.aura_catalog_cache_seconds}"},
    )


@router.get("/altstore/source.json")
def altstore_source(
    store: StoreRepository = Depends(store_dep),
    settings: Settings = Depends(settings_dep),
):
    """iOS feed for AltStore-compatible installers."""
    document = build_catalog(store, settings, Platform.IOS)
    return _feed_response(render_catalog(document), settings)


@router.get("/catalog")
def catalog(
    platform: Optional[Platform] = None,
    store: StoreRepository = Depends(store_dep),
    settings: Settings = Depends(settings_dep),
):
    """Feed for any platform; no filter means every app."""
    document = build_catalog(store, settings, platform)
    return _feed_response(render_catalog(document), settings)
