import asyncio
from pathlib import Path

import pytest
import yaml

from config import ServerConfig
from runtime import HierarchyCache
from server import ProfileHierarchyServer


def _server(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, cache: HierarchyCache | None = None) -> ProfileHierarchyServer:
    manifest = tmp_path / "profiles.yaml"
    manifest.write_text(
        yaml.safe_dump(
            {
                "profiles": [
                    {"name": "Net,Version=v4.0", "capabilities": ["X", "Y", "Z"], "description": "Full profile"},
                    {"name": "Net,Version=v4.0,Profile=Client", "capabilities": ["X", "Y"]},
                    {"name": "Micro,Version=v1.0", "capabilities": ["X"]},
                ]
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("PROFILE_MANIFEST_PATH", str(manifest))
    monkeypatch.delenv("HIDE_UNSUPPORTED", raising=False)
    return ProfileHierarchyServer(ServerConfig(), cache=cache)


def test_profile_hierarchy_renders_every_profile(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    server = _server(tmp_path, monkeypatch)

    output = asyncio.run(server.profile_hierarchy())

    assert output.startswith("## Profile Hierarchy")
    assert "- Profiles: `3`" in output
    assert "- Roots: `1`" in output
    assert "  - `Net,Version=v4.0`" in output
    assert "    - `Net,Version=v4.0,Profile=Client`" in output
    assert "      - `Micro,Version=v1.0`" in output


def test_hierarchy_is_built_once_per_manifest(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cache = HierarchyCache()
    server = _server(tmp_path, monkeypatch, cache=cache)

    async def scenario():
        first = await server.get_hierarchy()
        second = await server.get_hierarchy()
        return first, second

    first, second = asyncio.run(scenario())

    assert first is second
    assert len(cache) == 1


def test_simplified_hierarchy_collapses_chain(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).simplified_hierarchy())

    assert "- Top-level profiles: `1`" in output
    assert "- `Micro,Version=v1.0`" in output
    assert "`Net,Version=v4.0`" not in output


def test_check_requirements_lists_supported_profiles(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).check_requirements(["X", "Y"]))

    assert "- Required capabilities: `2`" in output
    assert "- Hide unsupported: `true`" in output
    assert "- `Net,Version=v4.0,Profile=Client` (supported)" in output
    assert "Micro" not in output


def test_check_requirements_can_show_unsupported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).check_requirements(["W"], hide_unsupported=False))

    assert "- Hide unsupported: `false`" in output
    assert "- `Micro,Version=v1.0` (missing: W)" in output


def test_check_requirements_reports_empty_view(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).check_requirements(["W"]))

    assert "No profiles remain in this view." in output


def test_check_requirements_rejects_empty_input(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).check_requirements(["", "  "]))

    assert "### Error" in output
    assert "no capabilities given" in output


def test_read_profile_shows_capabilities(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).read_profile("Net,Version=v4.0"))

    assert "Full profile" in output
    assert "- Supported set: `Net,Version=v4.0`" in output
    assert "- Capabilities: `3`" in output
    assert "  - X" in output


def test_read_profile_reports_unknown_profile(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = asyncio.run(_server(tmp_path, monkeypatch).read_profile("Mono,Version=v1.0"))

    assert "unknown profile: Mono,Version=v1.0" in output


def test_tools_refuse_work_during_shutdown(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    server = _server(tmp_path, monkeypatch)
    server.signal_handler(15)

    output = asyncio.run(server.profile_hierarchy())

    assert "server is shutting down" in output
