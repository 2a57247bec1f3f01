"""File-based store: JSON documents under AURA_DATA_DIR/store.

Fallback when no Postgres is configured. Every record is replaced atomically
(write to temp file, then rename), so readers never observe a half-written
version or verdict.

Download counters live in their own files under ``downloads/``, so counting a
download never rewrites a version record and cannot undo a verdict written by
another process. The lock only serializes writers inside one process: with
several workers sharing a data dir, concurrent verdict writes are still
last-write-wins and concurrent increments of one counter may lose a count.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from aura.schemas.models import App, AppWithVersions, Platform, Verdict, Version
from aura.store.base import StoreError, latest_version

logger = logging.getLogger(__name__)


def _atomic_write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class FileStore:
    """Persist apps and versions as JSON files. Survives restarts within same data dir."""

    def __init__(self, store_dir: Path):
        self._dir = Path(store_dir)
        self._apps_dir = self._dir / "apps"
        self._versions_dir = self._dir / "versions"
        self._downloads_dir = self._dir / "downloads"
        self._profiles_path = self._dir / "profiles.json"
        self._apps_dir.mkdir(parents=True, exist_ok=True)
        self._versions_dir.mkdir(parents=True, exist_ok=True)
        self._downloads_dir.mkdir(parents=True, exist_ok=True)
        # Serializes read-modify-write of a record within this process
        self._lock = threading.Lock()

    # -- paths & raw io ------------------------------------------------------

    def _app_path(self, app_id: str) -> Path:
        return self._apps_dir / f"{_safe_name(app_id)}.json"

    def _version_path(self, version_id: str) -> Path:
        return self._versions_dir / f"{_safe_name(version_id)}.json"

    def _downloads_path(self, version_id: str) -> Path:
        return self._downloads_dir / f"{_safe_name(version_id)}.json"

    def _read(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read {path.name}: {e}") from e

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        try:
            _atomic_write_json(path, data)
        except OSError as e:
            raise StoreError(f"Cannot write {path.name}: {e}") from e

    def _profiles(self) -> dict[str, str]:
        return self._read(self._profiles_path) or {}

    def _load_version(self, path: Path) -> Version | None:
        data = self._read(path)
        if data is None:
            return None
        try:
            version = Version.model_validate(data)
        except ValidationError as e:
            logger.warning("Skipping unreadable version record %s: %s", path.name, e)
            return None
        counter = self._read(self._downloads_path(version.version_id))
        if counter is not None:
            version.download_count = int(counter.get("count") or 0)
        return version

    def _load_app(self, path: Path, profiles: dict[str, str]) -> App | None:
        data = self._read(path)
        if data is None:
            return None
        try:
            app = App.model_validate(data)
        except ValidationError as e:
            logger.warning("Skipping unreadable app record %s: %s", path.name, e)
            return None
        app.developer_name = profiles.get(app.developer_id) or app.developer_name
        return app

    # -- StoreRepository -----------------------------------------------------

    def upsert_developer(self, developer_id: str, username: str) -> None:
        with self._lock:
            profiles = self._profiles()
            profiles[developer_id] = username
            self._write(self._profiles_path, profiles)

    def create_app(self, app: App) -> App:
        path = self._app_path(app.app_id)
        with self._lock:
            if path.exists():
                raise StoreError(f"App already exists: {app.app_id}")
            self._write(path, app.model_dump(mode="json", exclude={"developer_name"}))
        return self.get_app(app.app_id) or app

    def create_version(self, version: Version) -> Version:
        path = self._version_path(version.version_id)
        with self._lock:
            if not self._app_path(version.app_id).exists():
                raise StoreError(f"App not found: {version.app_id}")
            if path.exists():
                raise StoreError(f"Version already exists: {version.version_id}")
            self._write(path, version.model_dump(mode="json"))
        return version

    def get_app(self, app_id: str) -> App | None:
        return self._load_app(self._app_path(app_id), self._profiles())

    def get_version(self, version_id: str) -> Version | None:
        return self._load_version(self._version_path(version_id))

    def list_versions(self, app_id: str) -> list[Version]:
        return [v for v in self._all_versions() if v.app_id == app_id]

    def get_latest_version(self, app_id: str) -> Version | None:
        return latest_version(self.list_versions(app_id))

    def list_apps(self, platforms: set[Platform] | None = None) -> list[AppWithVersions]:
        profiles = self._profiles()
        by_app: dict[str, list[Version]] = {}
        for v in self._all_versions():
            by_app.setdefault(v.app_id, []).append(v)
        result: list[AppWithVersions] = []
        for path in sorted(self._apps_dir.glob("*.json")):
            app = self._load_app(path, profiles)
            if app is None:
                continue
            if platforms is not None and app.platform not in platforms:
                continue
            result.append(AppWithVersions(app=app, versions=by_app.get(app.app_id, [])))
        return result

    def update_verdict(self, version_id: str, verdict: Verdict) -> None:
        path = self._version_path(version_id)
        with self._lock:
            data = self._read(path)
            if data is None:
                raise StoreError(f"Version not found: {version_id}")
            data["verdict"] = verdict.model_dump(mode="json")
            self._write(path, data)

    def increment_downloads(self, version_id: str) -> Version | None:
        with self._lock:
            version = self._load_version(self._version_path(version_id))
            if version is None:
                return None
            version.download_count += 1
            self._write(self._downloads_path(version_id), {"count": version.download_count})
        return version

    def _all_versions(self) -> list[Version]:
        versions = []
        for path in sorted(self._versions_dir.glob("*.json")):
            v = self._load_version(path)
            if v is not None:
                versions.append(v)
        return versions


def _safe_name(record_id: str) -> str:
    """Record ids become file names; keep them inside the store directory."""
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in record_id)
