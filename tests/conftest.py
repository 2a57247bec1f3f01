"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from aura.audit import AuditClient
from aura.config import Settings
from aura.schemas.models import App, Category, Platform, Version
from aura.store.file_store import FileStore

T0 = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

GOOD_REPLY = '{"score": 92, "summary": "Looks like a legitimate note-taking app.", "flags": []}'


class FakeProvider:
    """Stands in for an LLM backend: returns canned replies or raises."""

    model = "fake-model"

    def __init__(self, reply: str = GOOD_REPLY, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def complete(self, prompt: str, system: str | None = None, **kwargs) -> str:
        self.calls.append({"prompt": prompt, "system": system, **kwargs})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings(tmp_path):
    return Settings(
        aura_data_dir=str(tmp_path / "data"),
        aura_database_url=None,
        openai_api_key=None,
        anthropic_api_key=None,
        aura_llm_provider="openai",
    )


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "store")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def audit_client(fake_provider):
    return AuditClient(fake_provider, timeout=5.0, provider_name="fake")


@pytest.fixture
def make_app(store):
    """Create an app (and optionally versions) directly in the store."""

    def _make(
        app_id: str = "6f1c2a9e-2d7b-4a51-9d0e-3b8f4c1a7e21",
        *,
        title: str = "NoteKeeper",
        description: str = "Take quick notes and sync them across devices.",
        category: str = Category.PRODUCTIVITY.value,
        platform: Platform = Platform.IOS,
        developer_name: str | None = "alice",
        versions: int = 1,
        created_at: datetime = T0,
    ) -> App:
        if developer_name:
            store.upsert_developer("dev-1", developer_name)
        app = store.create_app(
            App(
                app_id=app_id,
                title=title,
                description=description,
                category=category,
                platform=platform,
                developer_id="dev-1",
                icon_url="https://cdn.example.com/icons/notekeeper.png",
                created_at=created_at,
            )
        )
        for i in range(versions):
            store.create_version(
                Version(
                    version_id=f"{app_id}-v{i + 1}",
                    app_id=app_id,
                    version_string=f"1.{i}.0",
                    file_url=f"https://cdn.example.com/installers/{app_id}-{i + 1}.ipa",
                    file_size_bytes=1024 * (i + 1),
                    created_at=created_at + timedelta(days=i),
                )
            )
        return app

    return _make
