"""Key-shape validation for records headed to the remote store.

JSON encoding turns integer keys into strings, so a mapping that mixes the
two silently loses entries on the wire (``{1: "a", "1": "b"}`` collapses to
one key). Every mapping in a record must use exclusively string keys or
exclusively non-negative integer keys.
"""

from collections.abc import Collection, Mapping
from typing import Any, Literal

KeyClass = Literal["string", "number"]


def classify_key(key: Any) -> KeyClass | None:
    """Return the key class, or None for keys the store cannot encode."""
    if isinstance(key, str):
        return "string"
    # bool is an int subclass but is not an array index
    if isinstance(key, int) and not isinstance(key, bool) and key >= 0:
        return "number"
    return None


def is_well_formed(record: Any, *, reserved: Collection[str] = ()) -> bool:
    """Check that every mapping in ``record`` has homogeneously typed keys.

    Args:
        record: The record to check. Must be acyclic.
        reserved: Top-level keys left out of the check, such as the version
            stamp added after serialization.

    Returns:
        False as soon as any mapping, at any depth, mixes key classes or uses
        a key that is neither a string nor a non-negative integer.
    """
    if isinstance(record, Mapping):
        return _mapping_is_well_formed(record, reserved)
    if isinstance(record, (list, tuple)):
        return all(is_well_formed(item) for item in record)
    return True


def _mapping_is_well_formed(mapping: Mapping[Any, Any], reserved: Collection[str]) -> bool:
    seen: KeyClass | None = None
    for key, value in mapping.items():
        if key in reserved:
            continue
        key_class = classify_key(key)
        if key_class is None:
            return False
        if seen is None:
            seen = key_class
        elif key_class != seen:
            return False
        if isinstance(value, (Mapping, list, tuple)) and not is_well_formed(value):
            return False
    return True
