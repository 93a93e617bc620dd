"""Process lifecycle port - the host's "about to terminate" notification."""

from collections.abc import Awaitable, Callable
from typing import Protocol

TerminateCallback = Callable[[], Awaitable[None]]


class ProcessLifecyclePort(Protocol):
    """Protocol for subscribing to process termination."""

    def on_terminate(self, callback: TerminateCallback) -> None: ...
