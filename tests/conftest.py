"""Shared test fixtures for bindstore."""

from unittest.mock import AsyncMock

import pytest

from bindstore.config import Settings
from bindstore.domain.codec import VersionedCodec
from bindstore.gateway.memory_store_gateway import MemoryStoreGateway
from bindstore.port.remote_store_port import RemoteStorePort
from bindstore.usecase.binding_registry import BindingRegistry
from bindstore.usecase.data_binding import DataBinding


@pytest.fixture
def mock_settings() -> Settings:
    """Settings with test-safe defaults."""
    return Settings(
        environment="test",
        save_in_non_production=True,
        autosave_enabled=False,
        autosave_interval_seconds=1.0,
        store_backend="memory",
        log_level="DEBUG",
        log_format="console",
    )


@pytest.fixture
def registry() -> BindingRegistry:
    return BindingRegistry()


@pytest.fixture
def codec() -> VersionedCodec:
    return VersionedCodec()


@pytest.fixture
def mock_store() -> AsyncMock:
    """Mock RemoteStorePort that starts out empty and accepts writes."""
    store = AsyncMock(spec=RemoteStorePort)
    store.store_name = "Players"
    store.get_record.return_value = None
    store.put_record.return_value = None
    return store


@pytest.fixture
def memory_store() -> MemoryStoreGateway:
    return MemoryStoreGateway("Players")


@pytest.fixture
def make_binding(registry, codec, mock_store):
    """Factory for bindings against ``mock_store``; call inside a running loop."""

    def _make(bindings, *, store=None, parent=None, on_load_finished=None,
              master_key="P_1", saves_enabled=True):
        return DataBinding(
            "Players",
            master_key,
            bindings,
            parent,
            on_load_finished,
            store=store if store is not None else mock_store,
            registry=registry,
            codec=codec,
            saves_enabled=saves_enabled,
        )

    return _make
