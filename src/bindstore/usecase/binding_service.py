"""Binding service usecase - creates bindings against named stores."""

from typing import Any, Optional

from bindstore.config import Settings
from bindstore.domain.codec import VersionedCodec
from bindstore.domain.models import LoadFinishedHook
from bindstore.gateway.store_directory import StoreDirectory
from bindstore.scheduler.autosave_scheduler import AutosaveScheduler
from bindstore.usecase.binding_registry import BindingRegistry
from bindstore.usecase.data_binding import BindingSource, DataBinding


class BindingService:
    """Entry point for callers: open bindings, save or finalize them all."""

    def __init__(
        self,
        settings: Settings,
        stores: StoreDirectory,
        registry: Optional[BindingRegistry] = None,
        codec: Optional[VersionedCodec] = None,
    ) -> None:
        self._settings = settings
        self._stores = stores
        self.registry = registry if registry is not None else BindingRegistry()
        self.codec = codec or VersionedCodec(settings.version_dispatch)
        self.scheduler = AutosaveScheduler(self.registry, settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def stores(self) -> StoreDirectory:
        return self._stores

    def new_binding(
        self,
        store_name: str,
        master_key: str,
        bindings: BindingSource,
        parent: Any = None,
        on_load_finished: Optional[LoadFinishedHook] = None,
    ) -> DataBinding:
        """Construct a binding; its fetch starts in the background."""
        return DataBinding(
            store_name,
            master_key,
            bindings,
            parent,
            on_load_finished,
            store=self._stores.get(store_name),
            registry=self.registry,
            codec=self.codec,
            saves_enabled=self._settings.saves_enabled,
        )

    async def open_binding(
        self,
        store_name: str,
        master_key: str,
        bindings: BindingSource,
        parent: Any = None,
        on_load_finished: Optional[LoadFinishedHook] = None,
    ) -> DataBinding:
        """Open the store, construct a binding and wait until its fetch has completed."""
        await self._stores.open(store_name)
        binding = self.new_binding(store_name, master_key, bindings, parent, on_load_finished)
        return await binding.wait_until_retrieved()

    async def save_all(self) -> int:
        """Save every live binding now; returns successful writes."""
        return await self.scheduler.autosave_tick()

    async def finalize_all(self) -> int:
        """Finalize every live binding; returns how many left the registry."""
        return await self.scheduler.finalize_all()
