"""Store directory - one cached RemoteStore handle per store name."""

from collections.abc import Callable

import structlog

from bindstore.port.remote_store_port import RemoteStorePort

logger = structlog.get_logger()

StoreFactory = Callable[[str], RemoteStorePort]


class StoreDirectory:
    """Opens named stores on first use and hands out the same handle after.

    Store creation is logged so a misspelled store or key shows up in the
    logs instead of silently creating an empty store.
    """

    def __init__(self, factory: StoreFactory) -> None:
        self._factory = factory
        self._stores: dict[str, RemoteStorePort] = {}
        self._initialized: set[str] = set()

    def get(self, store_name: str) -> RemoteStorePort:
        store = self._stores.get(store_name)
        if store is None:
            store = self._factory(store_name)
            self._stores[store_name] = store
            logger.info("Opened data store", store_name=store_name, store_type=type(store).__name__)
        return store

    async def open(self, store_name: str) -> RemoteStorePort:
        """Get the handle for ``store_name``, initializing it on first open.

        An unreachable store is logged and still returned; its bindings see
        the failure on fetch and stop saving.
        """
        store = self.get(store_name)
        if store_name not in self._initialized:
            self._initialized.add(store_name)
            try:
                await store.initialize()
            except Exception as e:
                logger.error(
                    "Failed to initialize data store", store_name=store_name, error=str(e)
                )
        return store

    @property
    def store_names(self) -> list[str]:
        return list(self._stores)

    async def close_all(self) -> None:
        for name, store in list(self._stores.items()):
            try:
                await store.cleanup()
            except Exception as e:
                logger.warning("Store cleanup failed", store_name=name, error=str(e))
        self._stores.clear()
        self._initialized.clear()
