"""Tests for key pools, statuses, and key stores (no API keys needed)."""

from unittest.mock import MagicMock

import pytest

from niche_finder.keys import (
    DiskKeyStore,
    KeyRing,
    KeyStatus,
    MemoryKeyStore,
    keys_from_env,
    mask,
)

IDLE, VALID, INVALID = KeyStatus.IDLE, KeyStatus.VALID, KeyStatus.INVALID


def _ring(keys, statuses=None, provider="gemini"):
    store = MemoryKeyStore()
    store.save(provider, keys, statuses or [])
    return KeyRing(provider, store), store


class TestLoading:
    def test_empty_store(self):
        ring = KeyRing("openai")
        assert ring.keys == []
        assert ring.statuses == []
        assert ring.active_index is None
        assert not ring.has_valid()

    def test_short_status_list_padded_with_idle(self):
        ring, _ = _ring(["a", "b", "c"], ["valid"])
        assert ring.statuses == [VALID, IDLE, IDLE]

    def test_long_status_list_truncated(self):
        ring, _ = _ring(["a"], ["invalid", "valid", "valid"])
        assert ring.statuses == [INVALID]

    def test_unknown_status_becomes_idle(self):
        ring, _ = _ring(["a", "b"], ["bogus", "valid"])
        assert ring.statuses == [IDLE, VALID]

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            KeyRing("anthropic")

    def test_copies_are_returned(self):
        ring, _ = _ring(["a"], ["valid"])
        ring.keys.append("x")
        ring.statuses.append(INVALID)
        assert len(ring) == 1
        assert ring.statuses == [VALID]


class TestEdits:
    def test_set_keys_resets_statuses(self):
        ring, store = _ring(["a", "b"], ["valid", "invalid"])
        ring.set_active(0)

        ring.set_keys([" k1 ", "k2", ""])

        assert ring.keys == ["k1", "k2", ""]
        assert ring.statuses == [IDLE, IDLE, IDLE]
        assert ring.active_index is None
        assert store.load("gemini") == (["k1", "k2", ""], ["idle", "idle", "idle"])

    def test_add(self):
        ring, store = _ring(["a"], ["valid"])
        ring.add("b")
        assert ring.keys == ["a", "b"]
        assert ring.statuses == [VALID, IDLE]
        assert store.load("gemini")[0] == ["a", "b"]

    def test_delete_keeps_alignment(self):
        ring, store = _ring(["a", "b", "c"], ["valid", "invalid", "idle"])
        ring.delete(1)
        assert ring.keys == ["a", "c"]
        assert ring.statuses == [VALID, IDLE]
        assert store.load("gemini") == (["a", "c"], ["valid", "idle"])

    def test_delete_before_active_shifts_it(self):
        ring, _ = _ring(["a", "b", "c"])
        ring.set_active(2)
        ring.delete(0)
        assert ring.active_index == 1
        assert ring.keys[ring.active_index] == "c"

    def test_delete_active_clears_it(self):
        ring, _ = _ring(["a", "b"])
        ring.set_active(1)
        ring.delete(1)
        assert ring.active_index is None

    def test_delete_after_active_leaves_it(self):
        ring, _ = _ring(["a", "b"])
        ring.set_active(0)
        ring.delete(1)
        assert ring.active_index == 0

    def test_delete_out_of_range(self):
        ring, _ = _ring(["a"])
        with pytest.raises(IndexError):
            ring.delete(3)


class TestStatusTransitions:
    def test_mark_invalid(self):
        ring, store = _ring(["a", "b"], ["valid", "valid"])
        assert ring.mark_invalid(1) is True
        assert ring.statuses == [VALID, INVALID]
        assert store.load("gemini")[1] == ["valid", "invalid"]

    def test_mark_invalid_is_idempotent(self):
        store = MagicMock()
        store.load.return_value = (["a", "b"], ["valid", "valid"])
        ring = KeyRing("gemini", store)

        assert ring.mark_invalid(0) is True
        assert ring.mark_invalid(0) is False

        assert ring.statuses == [INVALID, VALID]
        store.save.assert_called_once()

    def test_mark_invalid_out_of_range_is_ignored(self):
        ring, _ = _ring(["a"], ["valid"])
        assert ring.mark_invalid(5) is False
        assert ring.mark_invalid(-1) is False
        assert ring.statuses == [VALID]

    def test_mark_invalid_never_promotes(self):
        ring, _ = _ring(["a"], ["idle"])
        ring.mark_invalid(0)
        assert not ring.has_valid()

    def test_apply_validation(self):
        ring, store = _ring(["a", "b", "c"])
        ring.mark_checking()
        assert ring.statuses == [KeyStatus.CHECKING] * 3

        ring.apply_validation([True, False, True])

        assert ring.statuses == [VALID, INVALID, VALID]
        assert ring.has_valid()
        assert store.load("gemini")[1] == ["valid", "invalid", "valid"]

    def test_apply_validation_length_mismatch(self):
        ring, _ = _ring(["a", "b"])
        with pytest.raises(ValueError, match="2 keys"):
            ring.apply_validation([True])

    def test_active_index_does_not_touch_statuses(self):
        ring, _ = _ring(["a", "b"], ["invalid", "valid"])
        ring.set_active(0)
        assert ring.statuses == [INVALID, VALID]
        ring.clear_active()
        assert ring.active_index is None


class TestDiskKeyStore:
    def test_round_trip_across_instances(self, tmp_path):
        store = DiskKeyStore(tmp_path / "keys")
        ring = KeyRing("openai", store)
        ring.set_keys(["sk-1", "sk-2"])
        ring.apply_validation([False, True])
        store.close()

        reopened = DiskKeyStore(tmp_path / "keys")
        ring2 = KeyRing("openai", reopened)
        assert ring2.keys == ["sk-1", "sk-2"]
        assert ring2.statuses == [INVALID, VALID]
        assert ring2.active_index is None
        assert KeyRing("gemini", reopened).keys == []
        reopened.close()

    def test_default_directory_under_cache_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NICHE_FINDER_CACHE_DIR", str(tmp_path))
        store = DiskKeyStore()
        assert store.directory == str(tmp_path / "keys")


class TestHelpers:
    def test_keys_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", " g1, g2 ,,g3 ")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert keys_from_env("gemini") == ["g1", "g2", "g3"]
        assert keys_from_env("openai") == []

    def test_mask(self):
        assert mask("sk-abcdef123") == "sk-a..."
        assert mask("") == "<blank>"
