"""Domain models for bindstore."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, Union

# Wire record shapes. Values are JSON scalars, lists of them, or nested records.
JSONScalar = Union[str, int, float, bool, None]
JSONRecord = dict[Any, Any]
MasterRecord = dict[str, dict[str, JSONRecord]]

# (obj, stored_record, binding) -> success
DeserializeProcedure = Callable[[Any, JSONRecord, Any], Union[bool, Awaitable[bool]]]
LoadFinishedHook = Callable[[Any, Any], Union[None, Awaitable[None]]]
SaveCompleteHook = Callable[[Any, bool], Union[None, Awaitable[None]]]


class RetrievedState(str, Enum):
    """Whether a binding's single authoritative fetch has completed."""

    NOT_RETRIEVED = "not_retrieved"
    RETRIEVED = "retrieved"


class VersionDispatch(str, Enum):
    """How the codec picks a deserialize procedure for a stored record."""

    # Use the procedure registered for the record's stored version tag.
    STORED = "stored"
    # Always use the object's latest procedure, whatever the stored tag says.
    LATEST = "latest"


class CompliantObject(Protocol):
    """Anything with persistable state that can be bound to a master key.

    Checked structurally when a binding is constructed; no base class needed.
    """

    retrieved: bool
    versions: Mapping[str, DeserializeProcedure]
    latest: str

    def serialize(self) -> JSONRecord: ...


@dataclass
class SaveOutcome:
    """Result of assembling one aggregate write."""

    record: MasterRecord
    written: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    # Sub-keys whose new encoding was rejected and whose last good one was written again
    retained: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "written": list(self.written),
            "dropped": list(self.dropped),
            "retained": list(self.retained),
        }
