"""Tests for SQLite-backed device storage."""

import pytest

from budgetly.data.device_storage import DeviceStorage


class TestDeviceStorage:
    """Tests for DeviceStorage."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, storage):
        assert await storage.get_item("missing") is None

    @pytest.mark.asyncio
    async def test_set_and_replace(self, storage):
        await storage.set_item("key", "one")
        await storage.set_item("key", "two")

        assert await storage.get_item("key") == "two"
        assert await storage.get_all_keys() == ["key"]

    @pytest.mark.asyncio
    async def test_remove(self, storage):
        await storage.set_item("key", "value")
        await storage.remove_item("key")

        assert await storage.get_item("key") is None

    @pytest.mark.asyncio
    async def test_multi_remove(self, storage):
        for key in ("a", "b", "c"):
            await storage.set_item(key, key)

        await storage.multi_remove(["a", "c", "not-there"])

        assert await storage.get_all_keys() == ["b"]

    @pytest.mark.asyncio
    async def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / "nested" / "storage.db"
        first = DeviceStorage(path)
        await first.initialize()
        await first.set_item("persisted", "yes")
        await first.close()

        second = DeviceStorage(path)
        await second.initialize()
        try:
            assert await second.get_item("persisted") == "yes"
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_use_before_initialize_raises(self, tmp_path):
        storage = DeviceStorage(tmp_path / "storage.db")

        with pytest.raises(RuntimeError):
            await storage.get_item("key")
