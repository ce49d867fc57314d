from pathlib import Path

import pytest
import yaml

from capsets import FilterSet, IntersectionSet
from catalog import ProfileCatalog


def _write_manifest(tmp_path: Path, profiles) -> Path:
    manifest = tmp_path / "profiles.yaml"
    manifest.write_text(yaml.safe_dump({"profiles": profiles}), encoding="utf-8")
    return manifest


def test_loads_profiles_in_manifest_order(tmp_path: Path) -> None:
    manifest = _write_manifest(
        tmp_path,
        [
            {"name": "Net,Version=v4.0", "capabilities": ["System.String", "System.Linq"]},
            {"name": "Net,Version=v4.0,Profile=Client", "capabilities": ["System.String"]},
        ],
    )

    catalog = ProfileCatalog(manifest)

    assert len(catalog) == 2
    entries = catalog.entries()
    assert [str(entry) for entry in entries] == ["Net,Version=v4.0", "Net,Version=v4.0,Profile=Client"]
    assert entries[0].capability_names == frozenset({"System.String", "System.Linq"})
    assert entries[0].declared_set is None


def test_single_supported_set_is_declared_directly(tmp_path: Path) -> None:
    manifest = _write_manifest(tmp_path, [{"name": "Core,Version=v5.0", "supports": ["Net*,Version=v4.0+"]}])

    entry = ProfileCatalog(manifest).entry("Core,Version=v5.0")

    assert entry is not None
    assert entry.declared_set == FilterSet(identifier="Net*", min_version=(4, 0))


def test_several_supported_sets_are_intersected(tmp_path: Path) -> None:
    manifest = _write_manifest(
        tmp_path,
        [{"name": "Core,Version=v5.0", "supports": ["Net*,Version=v4.0+", "Net,Version=v4.5"]}],
    )

    entry = ProfileCatalog(manifest).entry("Core,Version=v5.0")

    assert isinstance(entry.declared_set, IntersectionSet)
    assert len(entry.declared_set.members) == 2


def test_read_returns_manifest_document(tmp_path: Path) -> None:
    manifest = _write_manifest(
        tmp_path,
        [{"name": "Net,Version=v4.0", "capabilities": ["System.String"], "description": "Desktop profile"}],
    )
    catalog = ProfileCatalog(manifest)

    doc = catalog.read("net,Version=v4.0")

    assert doc is not None
    assert doc.description == "Desktop profile"
    assert catalog.read("Mono,Version=v1.0") is None
    assert catalog.read("not a profile") is None
    assert catalog.entry("not a profile") is None


def test_rejects_malformed_profile_name(tmp_path: Path) -> None:
    manifest = _write_manifest(tmp_path, [{"name": "Net 4.0"}])

    with pytest.raises(ValueError, match="profile #0: malformed profile name"):
        ProfileCatalog(manifest)


def test_rejects_malformed_supported_set(tmp_path: Path) -> None:
    manifest = _write_manifest(tmp_path, [{"name": "Net,Version=v4.0", "supports": ["Net,Version="]}])

    with pytest.raises(ValueError, match="malformed supported set"):
        ProfileCatalog(manifest)


def test_rejects_duplicate_profiles(tmp_path: Path) -> None:
    manifest = _write_manifest(tmp_path, [{"name": "Net,Version=v4.0"}, {"name": "NET,Version=v4.0"}])

    with pytest.raises(ValueError, match="profile #1: duplicate profile"):
        ProfileCatalog(manifest)


def test_rejects_non_mapping_items(tmp_path: Path) -> None:
    manifest = _write_manifest(tmp_path, ["Net,Version=v4.0"])

    with pytest.raises(ValueError, match="expected a mapping"):
        ProfileCatalog(manifest)


def test_rejects_non_mapping_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "profiles.yaml"
    manifest.write_text(yaml.safe_dump(["Net,Version=v4.0"]), encoding="utf-8")

    with pytest.raises(ValueError, match="must be a mapping"):
        ProfileCatalog(manifest)


def test_empty_manifest_has_no_profiles(tmp_path: Path) -> None:
    manifest = tmp_path / "profiles.yaml"
    manifest.write_text("", encoding="utf-8")

    assert len(ProfileCatalog(manifest)) == 0
