"""Tests for paths, settings and on-disk storage."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from orcamentor.runtime.paths import ProjectPaths, get_paths, set_home
from orcamentor.runtime.settings import Settings, load_settings
from orcamentor.runtime.storage import JsonDirectoryStorage, StorageError, load_json, load_records
from orcamentor.runtime.store import open_store


def test_paths_follow_orcamentor_home(isolated_home: Path) -> None:
    paths = get_paths()

    assert paths.root == isolated_home.resolve()
    assert paths.settings == isolated_home.resolve() / "config" / "settings.toml"
    assert paths.data == isolated_home.resolve() / "data"
    assert get_paths() is paths


def test_set_home_replaces_singleton(tmp_path: Path) -> None:
    paths = set_home(tmp_path / "other")

    assert get_paths() is paths
    paths.ensure_directories()
    assert paths.exports.is_dir()
    assert paths.data.is_dir()


def test_settings_defaults_without_file(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.toml")

    assert settings == Settings()


def test_settings_from_toml(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    config = tmp_path / "settings.toml"
    config.write_text(
        """
[documents]
watermark_position = "bottom-right"
watermark_opacity = 140

[quotes]
validity_days = 30

[dashboard]
top_categories = "many"

[assistant]
timeout = 5
""".lstrip(),
        encoding="utf-8",
    )
    monkeypatch.setenv("API_KEY", "secret")

    settings = load_settings(config)

    assert settings.watermark_position == "bottom-right"
    assert settings.watermark_opacity == 100
    assert settings.validity_days == 30
    assert settings.top_categories == 6
    assert settings.assistant_timeout == 5.0
    assert settings.assistant_api_key == "secret"


def test_unknown_watermark_position_falls_back(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config = tmp_path / "settings.toml"
    config.write_text('[documents]\nwatermark_position = "middle"\n', encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="orcamentor"):
        settings = load_settings(config)

    assert settings.watermark_position == "center"
    assert "Unknown watermark position" in caplog.text


def test_broken_toml_uses_defaults(tmp_path: Path) -> None:
    config = tmp_path / "settings.toml"
    config.write_text("[documents\n", encoding="utf-8")

    assert load_settings(config) == Settings()


def test_json_directory_storage_round_trip(tmp_path: Path) -> None:
    storage = JsonDirectoryStorage(tmp_path / "data")

    assert storage.read("sp_quotes") is None
    storage.write("sp_quotes", '[{"id": "Q1"}]')

    assert storage.read("sp_quotes") == '[{"id": "Q1"}]'
    assert sorted(p.name for p in (tmp_path / "data").iterdir()) == ["sp_quotes.json"]


def test_json_directory_storage_wraps_write_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "data"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(StorageError):
        JsonDirectoryStorage(blocker).write("sp_quotes", "[]")


def test_load_json_falls_back_on_corrupt_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    storage = JsonDirectoryStorage(tmp_path)
    (tmp_path / "sp_clients.json").write_text("[{", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="orcamentor"):
        assert load_json(storage, "sp_clients", []) == []

    assert "Corrupt JSON in sp_clients" in caplog.text


def test_load_records_rejects_non_list(tmp_path: Path) -> None:
    storage = JsonDirectoryStorage(tmp_path)
    (tmp_path / "sp_clients.json").write_text('{"id": "C1"}', encoding="utf-8")

    assert load_records(storage, "sp_clients", dict) == []


def test_open_store_reads_home_data(isolated_home: Path) -> None:
    data = isolated_home / "data"
    data.mkdir(parents=True)
    (data / "sp_clients.json").write_text(json.dumps([{"id": "C1", "name": "Maria"}]), encoding="utf-8")

    store = open_store(paths=ProjectPaths(isolated_home))

    assert [client.name for client in store.clients] == ["Maria"]
    store.update_profile(name="Oficina")
    assert json.loads((data / "sp_profile.json").read_text(encoding="utf-8"))["name"] == "Oficina"
