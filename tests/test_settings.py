import json

import pytest

from maxq.utils.errors import StorageError
from maxq.utils.settings import DEFAULT_SETTINGS, SettingsStore


def test_missing_file_gives_defaults(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    assert store.get() == DEFAULT_SETTINGS
    assert store.load_error is None
    assert not (tmp_path / "settings.json").exists()


def test_set_merges_and_persists(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(path)
    store.set({"output_root": "/renders", "max_path": "C:/max/3dsmaxcmd.exe"})
    merged = store.set({"max_path": ""})

    assert merged["output_root"] == "/renders"
    assert merged["max_path"] == ""
    assert json.loads(path.read_text(encoding="utf-8"))["output_root"] == "/renders"
    assert SettingsStore(path).get()["output_root"] == "/renders"


def test_get_returns_a_copy(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    store.get()["output_root"] = "elsewhere"
    assert store.get()["output_root"] == DEFAULT_SETTINGS["output_root"]


def test_nested_defaults_are_not_shared(tmp_path):
    first = SettingsStore(tmp_path / "a.json")
    second = SettingsStore(tmp_path / "b.json")

    first.get()["extra_env"]["LEAK"] = "1"
    assert first.get()["extra_env"] == {}

    first._data["extra_env"]["LEAK"] = "1"
    assert second.get()["extra_env"] == {}
    assert DEFAULT_SETTINGS["extra_env"] == {}


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    store = SettingsStore(path)
    assert isinstance(store.load_error, StorageError)
    assert store.get() == DEFAULT_SETTINGS


def test_unwritable_backing_raises_but_keeps_memory(tmp_path):
    # a directory where the file should be: unreadable and unwritable
    path = tmp_path / "settings.json"
    path.mkdir()
    store = SettingsStore(path)
    assert store.load_error is not None

    with pytest.raises(StorageError):
        store.set({"output_root": "/still/used"})
    assert store.get()["output_root"] == "/still/used"
