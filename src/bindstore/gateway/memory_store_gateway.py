"""In-memory store gateway - implements RemoteStorePort inside the process.

Used for development, tests, and hosts without a real store. Records go
through a JSON round trip so they come back exactly as a networked store
would return them (integer keys become strings, tuples become lists).
"""

import json
from typing import Any, Optional

import structlog

from bindstore.exceptions import RemoteStoreError
from bindstore.port.remote_store_port import RemoteStorePort

logger = structlog.get_logger()


class MemoryStoreGateway(RemoteStorePort):
    """Process-local store with failure injection for the next get/put."""

    def __init__(self, store_name: str) -> None:
        self.store_name = store_name
        self._data: dict[str, str] = {}
        self._fail_get: Optional[Exception] = None
        self._fail_put: Optional[Exception] = None
        self.get_calls = 0
        self.put_calls = 0

    def fail_next_get(self, error: Optional[Exception] = None) -> None:
        self._fail_get = error or RemoteStoreError(self.store_name, "injected get failure")

    def fail_next_put(self, error: Optional[Exception] = None) -> None:
        self._fail_put = error or RemoteStoreError(self.store_name, "injected put failure")

    async def get_record(self, master_key: str) -> Optional[dict[str, Any]]:
        self.get_calls += 1
        if self._fail_get is not None:
            error, self._fail_get = self._fail_get, None
            raise error

        raw = self._data.get(master_key)
        if raw is None:
            logger.debug("Record miss", store_name=self.store_name, master_key=master_key)
            return None
        return json.loads(raw)

    async def put_record(self, master_key: str, record: dict[str, Any]) -> None:
        self.put_calls += 1
        if self._fail_put is not None:
            error, self._fail_put = self._fail_put, None
            raise error

        try:
            self._data[master_key] = json.dumps(record)
        except (TypeError, ValueError) as e:
            raise RemoteStoreError(self.store_name, f"record is not JSON encodable: {e}") from e
        logger.debug(
            "Record stored",
            store_name=self.store_name,
            master_key=master_key,
            value_length=len(self._data[master_key]),
        )

    def keys(self) -> list[str]:
        return list(self._data)
