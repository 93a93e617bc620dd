"""Remote store port - abstract interface for the backing key-value store."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class RemoteStorePort(ABC):
    """Abstract interface for one named remote key-value store.

    Implementations report transport failures by raising; callers never
    inspect the error beyond logging it.
    """

    store_name: str

    @abstractmethod
    async def get_record(self, master_key: str) -> Optional[dict[str, Any]]:
        """
        Fetch the record stored under a master key.

        Args:
            master_key: Top-level record identifier

        Returns:
            The decoded record, or None if nothing is stored yet
        """

    @abstractmethod
    async def put_record(self, master_key: str, record: dict[str, Any]) -> None:
        """
        Replace the record stored under a master key.

        Args:
            master_key: Top-level record identifier
            record: JSON-encodable record
        """

    async def initialize(self) -> None:
        """Open connections, if the store needs any."""

    async def cleanup(self) -> None:
        """Release connection resources."""
