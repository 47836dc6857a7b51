# staffdocs/tests/test_tokens.py
"""
Unit tests for token stores.
"""

import json

import pytest

from staffdocs.tokens import FileTokenStore, MemoryTokenStore, TokenStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryTokenStore()
    return FileTokenStore(tmp_path / "tokens.json")


class TestTokenStores:
    """Behaviour shared by every store."""

    def test_empty_store(self, store):
        assert store.get() is None
        assert store.get_refresh() is None
        assert store.is_authenticated() is False

    def test_set_and_get(self, store):
        store.set("access", "refresh")

        assert store.get() == "access"
        assert store.get_refresh() == "refresh"
        assert store.is_authenticated() is True

    def test_set_replaces_pair(self, store):
        store.set("a1", "r1")
        store.set("a2", "r2")

        assert (store.get(), store.get_refresh()) == ("a2", "r2")

    def test_clear(self, store):
        store.set("access", "refresh")
        store.clear()

        assert store.get() is None
        assert store.get_refresh() is None
        assert not store.is_authenticated()

    def test_clear_empty_store(self, store):
        store.clear()
        assert store.get() is None

    def test_implements_protocol(self, store):
        assert isinstance(store, TokenStore)


class TestFileTokenStore:
    """File persistence specifics."""

    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "tokens.json"
        FileTokenStore(path).set("access", "refresh")

        reloaded = FileTokenStore(path)

        assert reloaded.get() == "access"
        assert reloaded.get_refresh() == "refresh"

    def test_uses_well_known_keys(self, tmp_path):
        path = tmp_path / "tokens.json"
        FileTokenStore(path).set("access", "refresh")

        assert json.loads(path.read_text()) == {
            "accessToken": "access",
            "refreshToken": "refresh",
        }

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "tokens.json"
        FileTokenStore(path).set("a", "r")
        assert path.exists()

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "tokens.json"
        store = FileTokenStore(path)
        store.set("a", "r")

        store.clear()

        assert not path.exists()

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text("{not json")

        store = FileTokenStore(path)

        assert store.get() is None
        assert not store.is_authenticated()
