"""Versioned codec - per-object version dispatch for stored sub-records.

Objects keep one deserialize procedure per schema version but only one
``serialize``. Records are decoded with the procedure for their stored
version and always re-encoded at ``latest``, so older records migrate forward
on the next save.
"""

import inspect
from collections.abc import Mapping
from typing import Any

import structlog

from bindstore.domain.models import CompliantObject, JSONRecord, VersionDispatch

logger = structlog.get_logger()

VERSION_FIELD = "__VERSION"


class VersionedCodec:
    """Decodes stored sub-records into compliant objects and encodes them back."""

    def __init__(self, dispatch: VersionDispatch = VersionDispatch.STORED) -> None:
        self._dispatch = VersionDispatch(dispatch)

    @property
    def dispatch(self) -> VersionDispatch:
        return self._dispatch

    def resolve_version(self, obj: CompliantObject, stored_version: Any) -> Any:
        """Pick the version tag whose procedure should decode a record."""
        if self._dispatch is VersionDispatch.LATEST:
            return obj.latest
        # Records written before versioning existed carry no usable tag.
        return stored_version if isinstance(stored_version, str) else obj.latest

    async def decode(self, obj: CompliantObject, stored: Mapping[str, Any], binding: Any) -> bool:
        """Run the matching deserialize procedure over a stored sub-record.

        The version field is stripped before the procedure sees the record.
        On success ``obj.retrieved`` is set; on failure it is left untouched
        along with whatever partial state the procedure produced.
        """
        remainder: JSONRecord = dict(stored)
        stored_version = remainder.pop(VERSION_FIELD, None)
        version = self.resolve_version(obj, stored_version)

        procedure = obj.versions.get(version) if isinstance(version, str) else None
        if procedure is None:
            logger.warning(
                "No deserialize procedure for stored version",
                version=version,
                latest=obj.latest,
                known_versions=sorted(map(str, obj.versions)),
            )
            return False

        try:
            result = procedure(obj, remainder, binding)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("Deserialize procedure raised", version=version)
            return False

        if not result:
            logger.warning("Deserialize failed", version=version)
            return False

        obj.retrieved = True
        if version != obj.latest:
            logger.info(
                "Decoded record at older version; will be upgraded on next save",
                stored_version=stored_version,
                latest=obj.latest,
            )
        return True

    def encode(self, obj: CompliantObject) -> JSONRecord:
        """Serialize ``obj`` and stamp it with its latest version tag.

        Raises:
            TypeError: ``serialize`` did not return a mapping.
        """
        serialized = obj.serialize()
        if not isinstance(serialized, Mapping):
            raise TypeError(
                f"serialize() must return a mapping, got {type(serialized).__name__}"
            )
        record: JSONRecord = dict(serialized)
        record[VERSION_FIELD] = obj.latest
        return record
