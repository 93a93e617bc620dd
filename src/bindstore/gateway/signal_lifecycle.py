"""Signal lifecycle gateway - turns SIGTERM/SIGINT into a terminate notification."""

import asyncio
import signal
from collections.abc import Iterable
from typing import Optional

import structlog

from bindstore.port.lifecycle_port import TerminateCallback

logger = structlog.get_logger()


class SignalLifecycle:
    """Implements ProcessLifecyclePort with asyncio signal handlers.

    Callbacks run once, in subscription order, on the first termination
    signal or explicit ``trigger()``; later signals are ignored.
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        signals: Iterable[signal.Signals] = (signal.SIGTERM, signal.SIGINT),
    ) -> None:
        self._loop = loop
        self._signals = tuple(signals)
        self._installed: list[signal.Signals] = []
        self._callbacks: list[TerminateCallback] = []
        self._task: Optional[asyncio.Task[None]] = None
        self._terminated = asyncio.Event()

    def on_terminate(self, callback: TerminateCallback) -> None:
        self._callbacks.append(callback)

    def install(self) -> None:
        """Register the signal handlers on the running loop."""
        self._loop = self._loop or asyncio.get_running_loop()
        for sig in self._signals:
            try:
                self._loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError) as e:
                # Not available on this platform or outside the main thread
                logger.warning("Cannot install signal handler", signal=sig.name, error=str(e))
            else:
                self._installed.append(sig)

    def close(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
        self._installed.clear()

    @property
    def triggered(self) -> bool:
        return self._task is not None

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Termination signal received", signal=sig.name)
        self.trigger()

    def trigger(self) -> "asyncio.Task[None]":
        """Notify subscribers that the process is about to terminate."""
        if self._task is None:
            loop = self._loop or asyncio.get_running_loop()
            self._task = loop.create_task(self._run_callbacks())
        return self._task

    async def _run_callbacks(self) -> None:
        for callback in self._callbacks:
            try:
                await callback()
            except Exception:
                logger.exception("Terminate callback raised")
        self._terminated.set()

    async def wait(self) -> None:
        """Block until termination callbacks have run."""
        await self._terminated.wait()
