"""Tests for projecting stored apps into the AltStore source feed."""

import json
from datetime import datetime, timedelta

import pytest

from aura.catalog import CATEGORY_MAP, build_catalog, bundle_identifier, map_category, project_catalog, render_catalog
from aura.catalog.projector import SUBTITLE_MAX_CHARS, sort_versions
from aura.publish import AppUpload, publish_app
from aura.schemas.models import App, AppWithVersions, Category, Platform, Verdict, Version

from conftest import T0

UUID_ID = "6f1c2a9e-2d7b-4a51-9d0e-3b8f4c1a7e21"


def _entry(app_id=UUID_ID, platform=Platform.IOS, versions=(), created_at=T0, **fields):
    app = App(app_id=app_id, title=fields.pop("title", "NoteKeeper"), platform=platform, created_at=created_at, **fields)
    return AppWithVersions(app=app, versions=list(versions))


def _version(version_id, app_id=UUID_ID, created_at=T0, **fields):
    return Version(version_id=version_id, app_id=app_id, created_at=created_at, **fields)


class TestDocument:

    def test_rendering_is_deterministic(self):
        """Input order does not change the rendered bytes."""
        entries = [
            _entry(versions=[_version("v1", file_url="https://x/1.ipa"), _version("v2", created_at=T0 + timedelta(days=1))]),
            _entry("other-app", platform=Platform.BOTH, created_at=T0 - timedelta(days=3)),
        ]
        first = render_catalog(project_catalog(entries))
        second = render_catalog(project_catalog(list(reversed(entries))))
        assert first == second

    def test_top_level_metadata_and_installer_keys(self):
        doc = json.loads(render_catalog(project_catalog([_entry(versions=[_version("v1")])], name="Test Store")))
        assert doc["name"] == "Test Store"
        assert doc["identifier"] == "com.aura.store"
        assert doc["news"] == []
        app = doc["apps"][0]
        assert set(app) == {
            "name", "bundleIdentifier", "developerName", "subtitle",
            "localizedDescription", "iconURL", "category", "versions",
        }
        assert set(app["versions"][0]) == {"version", "buildVersion", "date", "downloadURL", "size"}

    def test_app_without_versions_has_empty_list(self):
        """Apps with no versions are listed with an empty version list."""
        doc = json.loads(render_catalog(project_catalog([_entry()])))
        assert doc["apps"][0]["versions"] == []

    def test_empty_store_gives_empty_apps(self):
        doc = json.loads(render_catalog(project_catalog([])))
        assert doc["apps"] == []

    def test_verdicts_never_leak_into_feed(self):
        """Safety verdicts are not part of the installer feed."""
        v = _version("v1", verdict=Verdict(score=12, summary="Suspicious", flags=["scam"]))
        rendered = render_catalog(project_catalog([_entry(versions=[v])]))
        assert "Suspicious" not in rendered
        assert "score" not in rendered


class TestPlatformFilter:

    def test_ios_feed_includes_ios_and_both_only(self):
        """The iOS feed keeps IOS and BOTH apps and drops Android-only ones."""
        entries = [
            _entry("a-ios", Platform.IOS),
            _entry("a-both", Platform.BOTH),
            _entry("a-android", Platform.ANDROID),
        ]
        doc = project_catalog(entries, Platform.IOS)
        ids = {a.bundle_identifier for a in doc.apps}
        assert ids == {bundle_identifier("a-ios"), bundle_identifier("a-both")}

    def test_none_includes_everything(self):
        entries = [_entry("a", Platform.IOS), _entry("b", Platform.ANDROID)]
        assert len(project_catalog(entries, None).apps) == 2


class TestOrdering:

    def test_versions_newest_first(self):
        versions = [
            _version("v1", version_string="1.0.0"),
            _version("v3", version_string="1.2.0", created_at=T0 + timedelta(days=2)),
            _version("v2", version_string="1.1.0", created_at=T0 + timedelta(days=1)),
        ]
        doc = project_catalog([_entry(versions=versions)])
        assert [v.version for v in doc.apps[0].versions] == ["1.2.0", "1.1.0", "1.0.0"]

    def test_timestamp_ties_break_on_version_id(self):
        """Identical timestamps order by version id, highest first."""
        versions = [_version("aaa"), _version("ccc"), _version("bbb")]
        assert [v.version_id for v in sort_versions(versions)] == ["ccc", "bbb", "aaa"]

    def test_naive_timestamps_treated_as_utc(self):
        """Naive timestamps sort as UTC alongside aware ones."""
        naive = _version("v-naive", created_at=datetime(2025, 3, 15, 0, 0))
        aware = _version("v-aware", created_at=T0)
        assert [v.version_id for v in sort_versions([aware, naive])] == ["v-naive", "v-aware"]

    def test_apps_newest_first(self):
        entries = [_entry("old", created_at=T0), _entry("new", created_at=T0 + timedelta(hours=1))]
        doc = project_catalog(entries)
        assert [a.bundle_identifier for a in doc.apps] == [bundle_identifier("new"), bundle_identifier("old")]

    def test_versions_of_other_apps_are_ignored(self):
        doc = project_catalog([_entry(versions=[_version("v1"), _version("stray", app_id="someone-else")])])
        assert len(doc.apps[0].versions) == 1


class TestFieldMapping:

    def test_bundle_identifier_from_uuid(self):
        """Canonical UUID ids keep their hex digits."""
        assert bundle_identifier(UUID_ID) == "com.aura.store.6f1c2a9e2d7b4a519d0e3b8f4c1a7e21"

    def test_other_uuid_spellings_do_not_collide(self):
        """Uppercase, undashed, braced and URN forms are distinct apps with distinct ids."""
        spellings = [
            UUID_ID,
            UUID_ID.upper(),
            UUID_ID.replace("-", ""),
            "{" + UUID_ID + "}",
            "urn:uuid:" + UUID_ID,
        ]
        identifiers = [bundle_identifier(s) for s in spellings]
        assert len(set(identifiers)) == len(spellings)
        assert all(i.startswith("com.aura.store.x") for i in identifiers[1:])
        assert identifiers == [bundle_identifier(s) for s in spellings]

    def test_bundle_identifier_for_non_uuid_is_stable_and_distinct(self):
        a = bundle_identifier("legacy-1")
        assert a == bundle_identifier("legacy-1")
        assert a != bundle_identifier("legacy-2")
        assert a.startswith("com.aura.store.x")

    def test_custom_bundle_prefix(self):
        assert bundle_identifier(UUID_ID, "org.example").startswith("org.example.")

    @pytest.mark.parametrize("category", list(Category))
    def test_every_category_is_mapped(self, category):
        assert category.value in CATEGORY_MAP
        assert map_category(category.value) != "other"

    @pytest.mark.parametrize("category", [None, "", "Weather", "productivity"])
    def test_unknown_category_is_other(self, category):
        assert map_category(category) == "other"

    def test_subtitle_truncated_description_kept(self):
        description = "A" * 200
        app = project_catalog([_entry(description=description)]).apps[0]
        assert app.subtitle == "A" * SUBTITLE_MAX_CHARS
        assert app.localized_description == description

    def test_missing_fields_degrade_to_defaults(self):
        """Missing optional fields fall back to defaults instead of failing."""
        entry = _entry(description=None, icon_url=None, category="", versions=[
            _version("v1", version_string=None, file_url=None, file_size_bytes=None),
        ])
        app = project_catalog([entry]).apps[0]
        assert app.developer_name == "Unknown"
        assert app.subtitle == ""
        assert app.icon_url == ""
        assert app.category == "other"
        v = app.versions[0]
        assert v.version == "1.0.0"
        assert v.build_version == "1"
        assert v.download_url == ""
        assert v.size == 0
        assert v.date == "2025-03-14"

    def test_date_is_utc_calendar_day(self):
        late = datetime.fromisoformat("2025-03-14T23:30:00-05:00")
        v = project_catalog([_entry(versions=[_version("v1", created_at=late)])]).apps[0].versions[0]
        assert v.date == "2025-03-15"


def test_published_ios_app_appears_in_feed(store, settings):
    """An uploaded iOS app is downloadable from the feed."""
    settings.aura_catalog_name = "Aura Test"
    app, version = publish_app(store, AppUpload(
        developer_id="dev-9",
        developer_name="bob",
        title="Snapcam",
        description="Retro camera filters",
        category=Category.ENTERTAINMENT,
        platform=Platform.IOS,
        file_url="https://cdn.example.com/snapcam.ipa",
        file_size_bytes=4096,
    ))
    doc = json.loads(render_catalog(build_catalog(store, settings)))
    assert doc["name"] == "Aura Test"
    [entry] = doc["apps"]
    assert entry["bundleIdentifier"] == bundle_identifier(app.app_id)
    assert entry["developerName"] == "bob"
    assert entry["category"] == "entertainment"
    assert entry["versions"][0]["downloadURL"] == "https://cdn.example.com/snapcam.ipa"
    assert entry["versions"][0]["size"] == 4096


def test_android_app_is_absent_from_ios_feed(store, settings, make_app):
    make_app(platform=Platform.ANDROID)
    doc = build_catalog(store, settings)
    assert doc.apps == ()
