import pytest

from quiz_kiosk.core.services.local_storage import LocalStorage, MemoryStorage


def test_local_storage_round_trip(tmp_path):
    storage = LocalStorage(tmp_path / "data")
    assert storage.read("quizkiosk-admin-state") is None

    storage.write("quizkiosk-admin-state", '{"students": []}')

    assert (tmp_path / "data" / "quizkiosk-admin-state.json").exists()
    assert storage.read("quizkiosk-admin-state") == '{"students": []}'
    assert not list((tmp_path / "data").glob("*.tmp"))


def test_local_storage_remove_is_idempotent(tmp_path):
    storage = LocalStorage(tmp_path)
    storage.write("usage", "{}")
    storage.remove("usage")
    storage.remove("usage")
    assert storage.read("usage") is None


def test_local_storage_rejects_path_like_keys(tmp_path):
    storage = LocalStorage(tmp_path)
    with pytest.raises(ValueError):
        storage.write("../escape", "{}")


def test_memory_storage_copies_initial_values():
    initial = {"key": "value"}
    storage = MemoryStorage(initial)
    storage.write("key", "changed")
    assert initial["key"] == "value"
    assert storage.read("key") == "changed"
