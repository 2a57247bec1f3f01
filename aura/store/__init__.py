"""App/version storage: Postgres (preferred) or file-based fallback."""

from __future__ import annotations

import logging

from aura.config import get_settings
from aura.store.base import StoreError, StoreRepository, latest_version
from aura.store.file_store import FileStore

logger = logging.getLogger(__name__)

_store: StoreRepository | None = None


def get_store() -> StoreRepository:
    """Return singleton store (Postgres if configured, else file-based)."""
    global _store
    if _store is not None:
        return _store
    settings = get_settings()
    if settings.aura_database_url:
        try:
            from aura.store.postgres_store import PostgresStore

            _store = PostgresStore(settings.aura_database_url)
            logger.info("Using Postgres store")
        except Exception as e:
            logger.warning("Postgres store failed (%s), falling back to file store", e)
            _store = FileStore(settings.store_dir)
    else:
        _store = FileStore(settings.store_dir)
        logger.info("Using file-based store (AURA_DATA_DIR/store)")
    return _store


__all__ = ["FileStore", "StoreError", "StoreRepository", "get_store", "latest_version"]
