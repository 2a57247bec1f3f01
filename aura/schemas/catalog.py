"""AltStore source document: the feed consumed by the external iOS installer.

Field names are serialized with the installer's camelCase aliases; keep
``by_alias=True`` when dumping.
"""

from pydantic import BaseModel, ConfigDict, Field


class CatalogVersion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: str
    build_version: str = Field(default="1", alias="buildVersion")
    date: str  # YYYY-MM-DD
    download_url: str = Field(alias="downloadURL")
    size: int = 0


class CatalogApp(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    bundle_identifier: str = Field(alias="bundleIdentifier")
    developer_name: str = Field(alias="developerName")
    subtitle: str = ""
    localized_description: str = Field(default="", alias="localizedDescription")
    icon_url: str = Field(default="", alias="iconURL")
    category: str = "other"
    versions: tuple[CatalogVersion, ...] = ()


class CatalogDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    identifier: str
    subtitle: str = ""
    description: str = ""
    apps: tuple[CatalogApp, ...] = ()
    news: tuple[dict, ...] = ()
