"""Download redirect: count the download and send the client to the stored package."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from aura.store import StoreError, StoreRepository
from backend.deps import store_dep

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/download/{version_id}")
def download(version_id: str, store: StoreRepository = Depends(store_dep)):
    """Increment the version's counter and redirect. Never gated by audit status."""
    version = store.get_version(version_id)
    if version is None or not version.file_url:
        raise HTTPException(status_code=404, detail="Version not found")
    try:
        store.increment_downloads(version_id)
    except StoreError as e:
        # Best-effort counter; the redirect still happens
        logger.warning("Download counter not updated for %s: %s", version_id, e)
    return RedirectResponse(version.file_url, status_code=302)
