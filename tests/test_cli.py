"""CLI commands against a temporary file store."""

import json

import pytest
from typer.testing import CliRunner

from aura import cli
from aura.audit import AuditClient

from conftest import FakeProvider

APP_ID = "6f1c2a9e-2d7b-4a51-9d0e-3b8f4c1a7e21"

runner = CliRunner()


@pytest.fixture(autouse=True)
def _wire(monkeypatch, store, settings):
    monkeypatch.setattr(cli, "get_store", lambda: store)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)


def _use_provider(monkeypatch, provider):
    monkeypatch.setattr(
        cli.AuditClient,
        "from_settings",
        classmethod(lambda cls, settings, provider_name=None: AuditClient(provider, provider_name="fake")),
    )


def test_audit_prints_verdict(monkeypatch, make_app, store):
    """A successful audit prints the score and flags and stores the verdict."""
    make_app()
    _use_provider(monkeypatch, FakeProvider('{"score": 30, "summary": "Phishing risk", "flags": ["credential form"]}'))
    result = runner.invoke(cli.app, ["audit", APP_ID])
    assert result.exit_code == 0, result.output
    assert "30/100" in result.output
    assert "credential form" in result.output
    assert store.get_version(f"{APP_ID}-v1").verdict.score == 30


def test_audit_without_key_exits_nonzero(make_app, store):
    """Without credentials the command fails and writes nothing."""
    make_app()
    result = runner.invoke(cli.app, ["audit", APP_ID])
    assert result.exit_code == 1
    assert "configuration_missing" in result.output
    assert store.get_version(f"{APP_ID}-v1").verdict is None


def test_audit_shows_raw_reply(monkeypatch, make_app):
    """Unparseable replies are echoed verbatim for diagnosis."""
    make_app()
    _use_provider(monkeypatch, FakeProvider("[not json]"))
    result = runner.invoke(cli.app, ["audit", APP_ID])
    assert result.exit_code == 1
    assert "[not json]" in result.output


def test_catalog_to_stdout(make_app):
    make_app()
    result = runner.invoke(cli.app, ["catalog"])
    assert result.exit_code == 0
    doc = json.loads(result.stdout)
    assert doc["apps"][0]["name"] == "NoteKeeper"


def test_catalog_to_file(make_app, tmp_path):
    make_app()
    out = tmp_path / "source.json"
    result = runner.invoke(cli.app, ["catalog", "--output", str(out)])
    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["apps"][0]["versions"][0]["version"] == "1.0.0"


def test_apps_table(make_app):
    make_app()
    result = runner.invoke(cli.app, ["apps"], env={"COLUMNS": "200"})
    assert result.exit_code == 0
    assert "NoteKeeper" in result.output
    assert "pending" in result.output
