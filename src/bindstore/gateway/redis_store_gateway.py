"""Redis Store Gateway - implements RemoteStorePort."""

import json
from typing import Any, Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from bindstore.exceptions import RemoteStoreError
from bindstore.port.remote_store_port import RemoteStorePort

logger = structlog.get_logger()


class RedisStoreGateway(RemoteStorePort):
    """Gateway for a named store kept in Redis - Anti-Corruption Layer.

    Each master record is one JSON string value under
    ``{key_prefix}{store_name}:{master_key}``.
    """

    def __init__(
        self,
        client: "redis.Redis",
        store_name: str,
        key_prefix: str = "bindstore:",
    ):
        """Initialize Redis store gateway.

        Args:
            client: Redis client (``decode_responses=True``), usually shared
                by every store of the process
            store_name: Logical store name, used as a key namespace
            key_prefix: Prefix for every key written by this gateway
        """
        self.store_name = store_name
        self._client = client
        self._key_prefix = key_prefix

    def key_for(self, master_key: str) -> str:
        return f"{self._key_prefix}{self.store_name}:{master_key}"

    async def initialize(self) -> None:
        """Test the Redis connection."""
        try:
            await self._client.ping()
        except RedisError as e:
            raise RemoteStoreError(self.store_name, f"Redis ping failed: {e}") from e
        logger.info("Redis store gateway initialized", store_name=self.store_name)

    async def get_record(self, master_key: str) -> Optional[dict[str, Any]]:
        """
        Retrieve the master record.

        Args:
            master_key: Master record key

        Returns:
            Decoded record, or None if the key does not exist
        """
        key = self.key_for(master_key)
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            raise RemoteStoreError(self.store_name, f"GET {key} failed: {e}") from e

        if raw is None:
            logger.debug("Record miss", key=key)
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise RemoteStoreError(self.store_name, f"GET {key} returned invalid JSON: {e}") from e

    async def put_record(self, master_key: str, record: dict[str, Any]) -> None:
        """
        Store the master record.

        Args:
            master_key: Master record key
            record: JSON-encodable record
        """
        key = self.key_for(master_key)
        try:
            value = json.dumps(record)
        except (TypeError, ValueError) as e:
            raise RemoteStoreError(self.store_name, f"record is not JSON encodable: {e}") from e

        try:
            await self._client.set(key, value)
        except RedisError as e:
            raise RemoteStoreError(self.store_name, f"SET {key} failed: {e}") from e
        logger.debug("Record stored", key=key, value_length=len(value))
