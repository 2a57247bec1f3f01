"""Catalog feed: projection of the store into the external installer's source format."""

from aura.catalog.feed import build_catalog
from aura.catalog.projector import (
    CATEGORY_MAP,
    bundle_identifier,
    map_category,
    platforms_for,
    project_catalog,
    render_catalog,
)

__all__ = [
    "build_catalog",
    "CATEGORY_MAP",
    "bundle_identifier",
    "map_category",
    "platforms_for",
    "project_catalog",
    "render_catalog",
]
