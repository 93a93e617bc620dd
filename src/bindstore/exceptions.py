"""Custom exception classes.

Construction-time binding errors are raised to the caller immediately.
Runtime store failures are raised by gateways and contained by the bindings.
"""

from __future__ import annotations


class DataStoreError(Exception):
    """Base class for bindstore errors."""


class BindingError(DataStoreError):
    """A data binding could not be constructed.

    Raised before anything is registered, so a failed construction leaves no
    trace in the binding registry.
    """

    def __init__(
        self,
        message: str,
        *,
        store_name: str | None = None,
        master_key: str | None = None,
        sub_key: str | None = None,
    ) -> None:
        self.store_name = store_name
        self.master_key = master_key
        self.sub_key = sub_key
        super().__init__(
            f"{message} (store={store_name!r} master_key={master_key!r} sub_key={sub_key!r})"
        )


class InvalidBindingKeyError(BindingError):
    """Store name, master key or sub key is not a non-empty string."""


class DuplicateSubKeyError(BindingError):
    """The same sub key was bound twice in one binding."""


class NotSerializableError(BindingError):
    """The bound object has no callable ``serialize``."""


class MissingVersionTableError(BindingError):
    """The bound object has no (or an empty) ``versions`` table."""


class IncompleteVersionTableError(BindingError):
    """A version tag in the table has no deserialize procedure."""

    def __init__(self, message: str, *, version: object = None, **kwargs: str | None) -> None:
        self.version = version
        super().__init__(f"{message} version={version!r}", **kwargs)


class NoLatestVersionError(BindingError):
    """The bound object does not declare a ``latest`` version tag."""


class LatestVersionNotFoundError(BindingError):
    """The ``latest`` tag does not resolve to an entry of the version table."""

    def __init__(self, message: str, *, version: object = None, **kwargs: str | None) -> None:
        self.version = version
        super().__init__(f"{message} version={version!r}", **kwargs)


class RemoteStoreError(DataStoreError):
    """Transport failure talking to the remote key-value store.

    The core only logs these; it never inspects their internals.
    """

    def __init__(self, store_name: str, message: str) -> None:
        self.store_name = store_name
        super().__init__(f"[{store_name}] {message}")


class ConfigurationError(DataStoreError):
    """Settings could not be turned into a working store setup."""
