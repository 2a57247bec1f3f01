"""Postgres store: profiles, apps and app_versions tables via psycopg."""

from __future__ import annotations

import json
import logging
from typing import Any

from aura.schemas.models import SUMMARY_FALLBACK, App, AppWithVersions, Platform, Verdict, Version
from aura.store.base import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS apps (
        id TEXT PRIMARY KEY,
        developer_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        category TEXT NOT NULL,
        platform TEXT NOT NULL,
        icon_url TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS app_versions (
        id TEXT PRIMARY KEY,
        app_id TEXT NOT NULL REFERENCES apps (id),
        version_string TEXT,
        file_url TEXT,
        file_size_bytes BIGINT,
        download_count INT NOT NULL DEFAULT 0,
        ai_safety_score INT,
        ai_safety_summary TEXT,
        ai_safety_flags JSONB,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_app_versions_app_created
    ON app_versions (app_id, created_at DESC)
    """,
)

_APP_COLUMNS = """
    a.id, a.title, a.description, a.category, a.platform, a.developer_id,
    p.username, a.icon_url, a.created_at
"""

_VERSION_COLUMNS = """
    id, app_id, version_string, file_url, file_size_bytes, download_count,
    ai_safety_score, ai_safety_summary, ai_safety_flags, created_at
"""


class PostgresStore:
    """Persist apps and versions in Postgres. Survives restarts."""

    def __init__(self, database_url: str):
        self._url = database_url
        self._conn = self._connect()

    def _connect(self):
        try:
            import psycopg
        except ImportError:
            raise ImportError(
                "psycopg required for Postgres store. pip install 'psycopg[binary]'"
            )
        conn = psycopg.connect(self._url, autocommit=True)
        for statement in _SCHEMA:
            conn.execute(statement)
        return conn

    def _execute(self, query: str, params: tuple = ()):
        import psycopg

        try:
            return self._conn.execute(query, params)
        except psycopg.Error as e:
            raise StoreError(str(e)) from e

    def upsert_developer(self, developer_id: str, username: str) -> None:
        self._execute(
            """
            INSERT INTO profiles (id, username) VALUES (%s, %s)
            ON CONFLICT (id) DO UPDATE SET username = EXCLUDED.username
            """,
            (developer_id, username),
        )

    def create_app(self, app: App) -> App:
        self._execute(
            """
            INSERT INTO apps (id, developer_id, title, description, category, platform, icon_url, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                app.app_id,
                app.developer_id,
                app.title,
                app.description,
                app.category,
                app.platform.value,
                app.icon_url,
                app.created_at,
            ),
        )
        return self.get_app(app.app_id) or app

    def create_version(self, version: Version) -> Version:
        self._execute(
            """
            INSERT INTO app_versions (id, app_id, version_string, file_url, file_size_bytes, download_count, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                version.version_id,
                version.app_id,
                version.version_string,
                version.file_url,
                version.file_size_bytes,
                version.download_count,
                version.created_at,
            ),
        )
        return version

    def get_app(self, app_id: str) -> App | None:
        row = self._execute(
            f"""
            SELECT {_APP_COLUMNS}
            FROM apps a LEFT JOIN profiles p ON p.id = a.developer_id
            WHERE a.id = %s
            """,
            (app_id,),
        ).fetchone()
        return _row_to_app(row) if row else None

    def get_version(self, version_id: str) -> Version | None:
        row = self._execute(
            f"SELECT {_VERSION_COLUMNS} FROM app_versions WHERE id = %s",
            (version_id,),
        ).fetchone()
        return _row_to_version(row) if row else None

    def get_latest_version(self, app_id: str) -> Version | None:
        row = self._execute(
            f"""
            SELECT {_VERSION_COLUMNS} FROM app_versions
            WHERE app_id = %s
            ORDER BY created_at DESC, id DESC LIMIT 1
            """,
            (app_id,),
        ).fetchone()
        return _row_to_version(row) if row else None

    def list_versions(self, app_id: str) -> list[Version]:
        rows = self._execute(
            f"SELECT {_VERSION_COLUMNS} FROM app_versions WHERE app_id = %s",
            (app_id,),
        ).fetchall()
        return [_row_to_version(r) for r in rows]

    def list_apps(self, platforms: set[Platform] | None = None) -> list[AppWithVersions]:
        if platforms is None:
            rows = self._execute(
                f"SELECT {_APP_COLUMNS} FROM apps a LEFT JOIN profiles p ON p.id = a.developer_id"
            ).fetchall()
        else:
            rows = self._execute(
                f"""
                SELECT {_APP_COLUMNS}
                FROM apps a LEFT JOIN profiles p ON p.id = a.developer_id
                WHERE a.platform = ANY(%s)
                """,
                ([p.value for p in platforms],),
            ).fetchall()
        apps = [_row_to_app(r) for r in rows]
        if not apps:
            return []
        version_rows = self._execute(
            f"SELECT {_VERSION_COLUMNS} FROM app_versions WHERE app_id = ANY(%s)",
            ([a.app_id for a in apps],),
        ).fetchall()
        by_app: dict[str, list[Version]] = {}
        for r in version_rows:
            v = _row_to_version(r)
            by_app.setdefault(v.app_id, []).append(v)
        return [AppWithVersions(app=a, versions=by_app.get(a.app_id, [])) for a in apps]

    def update_verdict(self, version_id: str, verdict: Verdict) -> None:
        cur = self._execute(
            """
            UPDATE app_versions SET
                ai_safety_score = %s, ai_safety_summary = %s, ai_safety_flags = %s::jsonb
            WHERE id = %s
            """,
            (verdict.score, verdict.summary, json.dumps(verdict.flags), version_id),
        )
        if cur.rowcount == 0:
            raise StoreError(f"Version not found: {version_id}")

    def increment_downloads(self, version_id: str) -> Version | None:
        row = self._execute(
            f"""
            UPDATE app_versions SET download_count = download_count + 1
            WHERE id = %s
            RETURNING {_VERSION_COLUMNS}
            """,
            (version_id,),
        ).fetchone()
        return _row_to_version(row) if row else None


def _row_to_app(row: Any) -> App:
    return App(
        app_id=row[0],
        title=row[1],
        description=row[2],
        category=row[3],
        platform=Platform(row[4]),
        developer_id=row[5],
        developer_name=row[6],
        icon_url=row[7],
        created_at=row[8],
    )


def _row_to_version(row: Any) -> Version:
    verdict = None
    if row[6] is not None:
        flags = row[8] if isinstance(row[8], list) else (json.loads(row[8]) if row[8] else [])
        verdict = Verdict(score=row[6], summary=row[7] or SUMMARY_FALLBACK, flags=flags)
    return Version(
        version_id=row[0],
        app_id=row[1],
        version_string=row[2],
        file_url=row[3],
        file_size_bytes=row[4],
        download_count=row[5] or 0,
        verdict=verdict,
        created_at=row[9],
    )
