"""Tests for the key-value storage backends."""

import pytest

from mindtutor.classroom import MemoryStore, SqliteStore, StorageError, StorageFullError


class TestMemoryStore:

    def test_get_set_delete(self):
        store = MemoryStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert "k" in store
        store.delete("k")
        assert store.get("k") is None
        assert "k" not in store

    def test_delete_missing_key_is_noop(self):
        MemoryStore().delete("missing")

    def test_quota_raises_storage_full(self):
        store = MemoryStore(max_value_bytes=4)
        store.set("small", "abcd")
        with pytest.raises(StorageFullError):
            store.set("big", "abcde")
        assert store.get("big") is None

    def test_storage_full_is_storage_error(self):
        assert issubclass(StorageFullError, StorageError)


class TestSqliteStore:

    def test_round_trip(self, tmp_path):
        store = SqliteStore(tmp_path / "tutor.db")
        store.set("tutor_progress_v1", '{"currentSeriesId": "OT"}')
        assert store.get("tutor_progress_v1") == '{"currentSeriesId": "OT"}'

    def test_overwrite(self, tmp_path):
        store = SqliteStore(tmp_path / "tutor.db")
        store.set("k", "one")
        store.set("k", "two")
        assert store.get("k") == "two"
        assert store.keys() == ["k"]

    def test_delete(self, tmp_path):
        store = SqliteStore(tmp_path / "tutor.db")
        store.set("k", "v")
        store.delete("k")
        assert store.get("k") is None
        store.delete("k")

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "tutor.db"
        SqliteStore(db_path)
        assert db_path.exists()

    def test_persists_across_instances(self, tmp_path):
        SqliteStore(tmp_path / "tutor.db").set("k", "v")
        assert SqliteStore(tmp_path / "tutor.db").get("k") == "v"

    def test_namespaces_are_isolated(self, tmp_path):
        alice = SqliteStore(tmp_path / "tutor.db", namespace="alice")
        bob = SqliteStore(tmp_path / "tutor.db", namespace="bob")
        alice.set("k", "a")
        bob.set("k", "b")
        assert alice.get("k") == "a"
        assert bob.get("k") == "b"
        bob.delete("k")
        assert alice.get("k") == "a"
        assert bob.keys() == []
