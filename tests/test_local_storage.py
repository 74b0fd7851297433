"""Tests for local durable storage"""
import json

from core.cart import FileStorage, MemoryStorage


def test_memory_storage():
    storage = MemoryStorage()
    assert storage.get_item("k") is None

    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"

    storage.remove_item("k")
    storage.remove_item("k")
    assert storage.get_item("k") is None


def test_file_storage_persists(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    FileStorage(str(path)).set_item("guest_cart", "[]")

    assert FileStorage(str(path)).get_item("guest_cart") == "[]"
    assert json.loads(path.read_text()) == {"guest_cart": "[]"}


def test_file_storage_keeps_other_keys(tmp_path):
    storage = FileStorage(str(tmp_path / "storage.json"))
    storage.set_item("a", "1")
    storage.set_item("b", "2")
    storage.remove_item("a")

    assert storage.get_item("a") is None
    assert storage.get_item("b") == "2"


def test_file_storage_missing_file(tmp_path):
    storage = FileStorage(str(tmp_path / "absent.json"))

    assert storage.get_item("guest_cart") is None
    storage.remove_item("guest_cart")


def test_file_storage_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{oops")
    storage = FileStorage(str(path))

    assert storage.get_item("guest_cart") is None
    storage.set_item("guest_cart", "[]")
    assert storage.get_item("guest_cart") == "[]"


def test_file_storage_leaves_no_temp_files(tmp_path):
    storage = FileStorage(str(tmp_path / "storage.json"))
    storage.set_item("guest_cart", "[]")

    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
