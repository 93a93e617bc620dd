"""Binding registry - the process-wide set of live data bindings."""

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from bindstore.usecase.data_binding import DataBinding

logger = structlog.get_logger()


class BindingRegistry:
    """Insertion-ordered set of live bindings.

    Created empty by the composition root and drained by ``finalize_all`` at
    shutdown. Holds non-owning references; all iteration goes through a
    snapshot so bindings may unregister themselves mid-sweep.
    """

    def __init__(self) -> None:
        self._bindings: list["DataBinding"] = []

    def register(self, binding: "DataBinding") -> None:
        if binding in self:
            return
        self._bindings.append(binding)
        logger.debug(
            "Binding registered",
            store_name=binding.store_name,
            master_key=binding.master_key,
            live_bindings=len(self._bindings),
        )

    def unregister(self, binding: "DataBinding") -> bool:
        """Remove ``binding``; returns False if it was not registered."""
        for index, candidate in enumerate(self._bindings):
            if candidate is binding:
                del self._bindings[index]
                logger.debug(
                    "Binding unregistered",
                    store_name=binding.store_name,
                    master_key=binding.master_key,
                    live_bindings=len(self._bindings),
                )
                return True
        return False

    def snapshot(self) -> list["DataBinding"]:
        return list(self._bindings)

    def for_each(self, fn: Callable[["DataBinding"], object]) -> None:
        for binding in self.snapshot():
            fn(binding)

    def clear(self) -> None:
        self._bindings.clear()

    def __contains__(self, binding: object) -> bool:
        return any(candidate is binding for candidate in self._bindings)

    def __iter__(self) -> Iterator["DataBinding"]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._bindings)
