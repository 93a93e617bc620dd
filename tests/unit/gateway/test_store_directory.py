"""Tests for StoreDirectory."""

from unittest.mock import AsyncMock, MagicMock

from bindstore.gateway.memory_store_gateway import MemoryStoreGateway
from bindstore.gateway.store_directory import StoreDirectory


class TestStoreDirectory:
    def test_handle_is_cached_per_name(self):
        factory = MagicMock(side_effect=MemoryStoreGateway)
        directory = StoreDirectory(factory)

        first = directory.get("Players")
        again = directory.get("Players")
        other = directory.get("Guilds")

        assert first is again
        assert first is not other
        assert factory.call_count == 2
        assert directory.store_names == ["Players", "Guilds"]

    async def test_close_all_cleans_up_every_store(self):
        stores = {}

        def factory(name):
            store = AsyncMock()
            store.store_name = name
            stores[name] = store
            return store

        directory = StoreDirectory(factory)
        directory.get("Players")
        directory.get("Guilds")
        stores["Players"].cleanup.side_effect = Exception("already closed")

        await directory.close_all()

        stores["Players"].cleanup.assert_awaited_once()
        stores["Guilds"].cleanup.assert_awaited_once()
        assert directory.store_names == []

    async def test_open_initializes_once(self):
        store = AsyncMock()
        directory = StoreDirectory(lambda name: store)

        first = await directory.open("Players")
        again = await directory.open("Players")

        assert first is again is store
        store.initialize.assert_awaited_once()

    async def test_open_survives_unreachable_store(self):
        store = AsyncMock()
        store.initialize.side_effect = Exception("connection refused")
        directory = StoreDirectory(lambda name: store)

        assert await directory.open("Players") is store
        assert directory.store_names == ["Players"]
