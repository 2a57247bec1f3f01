"""Load current store state and project it into the feed, with the configured source metadata."""

from aura.catalog.projector import platforms_for, project_catalog
from aura.config import Settings
from aura.schemas.catalog import CatalogDocument
from aura.schemas.models import Platform
from aura.store.base import StoreRepository


def build_catalog(store: StoreRepository, settings: Settings, platform: Platform | None = Platform.IOS) -> CatalogDocument:
    entries = store.list_apps(set(platforms_for(platform)))
    return project_catalog(
        entries,
        platform,
        name=settings.aura_catalog_name,
        identifier=settings.aura_catalog_identifier,
        subtitle=settings.aura_catalog_subtitle,
        description=settings.aura_catalog_description,
        bundle_prefix=settings.aura_catalog_bundle_prefix,
    )
