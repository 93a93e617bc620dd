"""Data binding - one master key, many versioned sub-records.

A binding groups several compliant objects under one remote record. It
trusts exactly one fetch, refuses to save before that fetch has completed,
and permanently stops saving if the fetch failed, so a store the process
never managed to read is never overwritten with default data.
"""

import asyncio
import copy
import inspect
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import structlog

from bindstore.domain.codec import VERSION_FIELD, VersionedCodec
from bindstore.domain.models import (
    CompliantObject,
    JSONRecord,
    LoadFinishedHook,
    RetrievedState,
    SaveCompleteHook,
    SaveOutcome,
)
from bindstore.domain.table_shape import is_well_formed
from bindstore.exceptions import (
    DuplicateSubKeyError,
    IncompleteVersionTableError,
    InvalidBindingKeyError,
    LatestVersionNotFoundError,
    MissingVersionTableError,
    NoLatestVersionError,
    NotSerializableError,
)
from bindstore.port.remote_store_port import RemoteStorePort
from bindstore.usecase.binding_registry import BindingRegistry

logger = structlog.get_logger()

BindingSource = Union[
    Mapping[str, CompliantObject], Iterable[tuple[str, CompliantObject]]
]


def validate_compliant_object(
    obj: Any, *, store_name: str, master_key: str, sub_key: str
) -> None:
    """Raise a BindingError subclass unless ``obj`` can be bound."""
    where = {"store_name": store_name, "master_key": master_key, "sub_key": sub_key}

    if not callable(getattr(obj, "serialize", None)):
        raise NotSerializableError("Unserializable object in binding", **where)

    versions = getattr(obj, "versions", None)
    if not isinstance(versions, Mapping) or not versions:
        raise MissingVersionTableError("Compliant object has no listed versions", **where)

    for version, procedure in versions.items():
        if not isinstance(version, str) or not callable(procedure):
            raise IncompleteVersionTableError(
                "Compliant object has a missing deserialize procedure",
                version=version,
                **where,
            )

    latest = getattr(obj, "latest", None)
    if latest is None or latest == "":
        raise NoLatestVersionError("Compliant object has no specified latest version", **where)
    if not isinstance(latest, str) or latest not in versions:
        raise LatestVersionNotFoundError(
            "Compliant object's latest version does not exist",
            version=latest,
            **where,
        )


async def _run_hook(hook: Any, *args: Any) -> None:
    result = hook(*args)
    if inspect.isawaitable(result):
        await result


class DataBinding:
    """Live association between a master key and its compliant objects."""

    def __init__(
        self,
        store_name: str,
        master_key: str,
        bindings: BindingSource,
        parent: Any = None,
        on_load_finished: Optional[LoadFinishedHook] = None,
        *,
        store: RemoteStorePort,
        registry: BindingRegistry,
        codec: Optional[VersionedCodec] = None,
        saves_enabled: bool = True,
    ) -> None:
        for label, value in (("store_name", store_name), ("master_key", master_key)):
            if not isinstance(value, str) or not value:
                raise InvalidBindingKeyError(
                    f"{label} must be a non-empty string",
                    store_name=store_name if isinstance(store_name, str) else None,
                    master_key=master_key if isinstance(master_key, str) else None,
                )

        self.store_name = store_name
        self.master_key = master_key
        self.parent = parent
        self.on_load_finished = on_load_finished

        self._store = store
        self._registry = registry
        self._codec = codec or VersionedCodec()
        self._saves_enabled = saves_enabled
        self._sub_records: dict[str, CompliantObject] = self._accept(bindings)
        # Last encoding per sub key known to be safe to write
        self._last_good: dict[str, JSONRecord] = {}

        self._retrieved_state = RetrievedState.NOT_RETRIEVED
        self._suppress_save = False
        self._fetching = False
        self._finalized = False
        self._save_lock = asyncio.Lock()
        self._log = logger.bind(store_name=store_name, master_key=master_key)

        # Raises before registration when there is no running loop.
        loop = asyncio.get_running_loop()
        self._registry.register(self)
        self.fetch_task: asyncio.Task[None] = loop.create_task(self.fetch())

    def _accept(self, bindings: BindingSource) -> dict[str, CompliantObject]:
        pairs = bindings.items() if isinstance(bindings, Mapping) else bindings
        accepted: dict[str, CompliantObject] = {}
        for sub_key, obj in pairs:
            if not isinstance(sub_key, str) or not sub_key:
                raise InvalidBindingKeyError(
                    "Sub key must be a non-empty string",
                    store_name=self.store_name,
                    master_key=self.master_key,
                )
            if sub_key in accepted:
                raise DuplicateSubKeyError(
                    "Attempt to overwrite binding (same sub key passed twice?)",
                    store_name=self.store_name,
                    master_key=self.master_key,
                    sub_key=sub_key,
                )
            validate_compliant_object(
                obj, store_name=self.store_name, master_key=self.master_key, sub_key=sub_key
            )
            accepted[sub_key] = obj
        return accepted

    # --- state ---

    @property
    def retrieved_state(self) -> RetrievedState:
        return self._retrieved_state

    @property
    def retrieved(self) -> bool:
        return self._retrieved_state is RetrievedState.RETRIEVED

    @property
    def suppress_save(self) -> bool:
        return self._suppress_save

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def is_saving(self) -> bool:
        return self._save_lock.locked()

    @property
    def sub_keys(self) -> list[str]:
        return list(self._sub_records)

    def get(self, sub_key: str) -> Optional[CompliantObject]:
        return self._sub_records.get(sub_key)

    async def wait_until_retrieved(self) -> "DataBinding":
        """Wait for the fetch scheduled at construction to finish."""
        await self.fetch_task
        return self

    # --- fetch ---

    async def fetch(self, bypass_cache: bool = False) -> None:
        """Populate every bound object from the remote record.

        Only one fetch is trusted: re-fetching a retrieved binding needs
        ``bypass_cache``, and a fetch issued while another is in flight is
        ignored.
        """
        if self.retrieved and not bypass_cache:
            self._log.warning("Attempt to retrieve store multiple times")
            return
        if self._fetching:
            self._log.warning("Fetch already in flight; ignoring")
            return

        self._fetching = True
        try:
            data = await self._load_master_data()
            self._last_good = {}
            for sub_key, obj in self._sub_records.items():
                # First-ever saves have no sub-record; deserializers fill defaults.
                stored = data.get(sub_key)
                if stored is None:
                    stored = {}
                elif not isinstance(stored, Mapping):
                    self._log.warning(
                        "Stored sub-record is not a mapping; treating as empty",
                        sub_key=sub_key,
                        stored_type=type(stored).__name__,
                    )
                    stored = {}
                else:
                    self._last_good[sub_key] = copy.deepcopy(dict(stored))
                if not await self._codec.decode(obj, stored, self):
                    self._log.warning("Deserialize failed", sub_key=sub_key)
            self._retrieved_state = RetrievedState.RETRIEVED
        finally:
            self._fetching = False

        self._log.info(
            "Binding retrieved",
            sub_keys=self.sub_keys,
            suppress_save=self._suppress_save,
        )

        if self.on_load_finished is not None:
            try:
                await _run_hook(self.on_load_finished, self, self.parent)
            except Exception:
                self._log.exception("Load finished hook raised")

    async def _load_master_data(self) -> Mapping[str, Any]:
        try:
            record = await self._store.get_record(self.master_key)
        except Exception as e:
            self._log.error("DataStore get failed; this binding will not save", error=str(e))
            self._suppress_save = True
            return {}

        if record is None:
            return {}
        if not isinstance(record, Mapping):
            self._log.warning(
                "Stored record is not a mapping; treating as empty",
                stored_type=type(record).__name__,
            )
            return {}

        data = record.get(self.master_key)
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            self._log.warning(
                "Stored master entry is not a mapping; treating as empty",
                stored_type=type(data).__name__,
            )
            return {}
        return data

    # --- save ---

    def assemble_record(self) -> SaveOutcome:
        """Encode every bound object into one master record.

        A sub-record whose serialization fails or whose keys mix strings and
        integers is left out of this record. Its last good encoding (from
        the fetch or an earlier save) is written in its place when there is
        one, so the stored copy is never wiped by a bad save.
        """
        entries: dict[str, JSONRecord] = {}
        outcome = SaveOutcome(record={self.master_key: entries})

        for sub_key, obj in self._sub_records.items():
            try:
                encoded = self._codec.encode(obj)
            except Exception:
                self._log.exception("Serialize failed; new data not saved", sub_key=sub_key)
                self._carry_forward(sub_key, entries, outcome)
                continue

            if not is_well_formed(encoded, reserved=(VERSION_FIELD,)):
                self._log.error(
                    "DATA LOST: keys were not exclusively strings or ints; new data not saved",
                    sub_key=sub_key,
                )
                self._carry_forward(sub_key, entries, outcome)
                continue

            entries[sub_key] = encoded
            self._last_good[sub_key] = copy.deepcopy(encoded)
            outcome.written.append(sub_key)

        return outcome

    def _carry_forward(
        self, sub_key: str, entries: dict[str, JSONRecord], outcome: SaveOutcome
    ) -> None:
        previous = self._last_good.get(sub_key)
        if previous is None:
            outcome.dropped.append(sub_key)
            return
        self._log.warning("Writing previous stored sub-record instead", sub_key=sub_key)
        entries[sub_key] = copy.deepcopy(previous)
        outcome.retained.append(sub_key)

    async def save(self, on_complete: Optional[SaveCompleteHook] = None) -> bool:
        """Write every bound object to the remote store in one record.

        Returns whether the write succeeded. Skipped saves (host policy, a
        failed fetch, or no fetch yet) issue no write, return False and do
        not call ``on_complete``.
        """
        if not self._saves_enabled:
            return False
        if self._suppress_save:
            self._log.debug("Save suppressed after failed fetch")
            return False
        if not self.retrieved:
            self._log.warning("Saved before any fetch; possible data corruption. Save skipped")
            return False

        async with self._save_lock:
            outcome = self.assemble_record()
            try:
                await self._store.put_record(self.master_key, outcome.record)
                success = True
            except Exception as e:
                self._log.warning("DataStore save failed", error=str(e))
                success = False
            else:
                self._log.debug("Binding saved", **outcome.to_dict())

        if on_complete is not None:
            try:
                await _run_hook(on_complete, self, success)
            except Exception:
                self._log.exception("Save complete hook raised")
        return success

    async def finalize(self) -> bool:
        """Save one last time; leave the registry only if the write succeeded."""
        return await self.save(on_complete=self._on_final_save)

    def _on_final_save(self, binding: "DataBinding", success: bool) -> None:
        if success:
            self._registry.unregister(binding)
            self._finalized = True

    def __repr__(self) -> str:
        return (
            f"DataBinding(store_name={self.store_name!r}, master_key={self.master_key!r}, "
            f"sub_keys={self.sub_keys!r}, state={self._retrieved_state.value})"
        )
