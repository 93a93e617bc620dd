"""APScheduler-based autosave scheduler."""

import asyncio

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bindstore.config import Settings
from bindstore.port.lifecycle_port import ProcessLifecyclePort
from bindstore.usecase.binding_registry import BindingRegistry

logger = structlog.get_logger()


class AutosaveScheduler:
    """Interval-based save sweep over every live binding, plus the shutdown flush."""

    def __init__(self, registry: BindingRegistry, settings: Settings) -> None:
        self._registry = registry
        self._settings = settings
        self._scheduler = AsyncIOScheduler()
        self._attached = False
        self._finalized = False

    async def autosave_tick(self) -> int:
        """Save every registered binding once; returns the number of successful writes."""
        bindings = self._registry.snapshot()
        if not bindings:
            return 0

        results = await asyncio.gather(
            *(binding.save() for binding in bindings), return_exceptions=True
        )
        saved = 0
        for binding, result in zip(bindings, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Autosave failed",
                    store_name=binding.store_name,
                    master_key=binding.master_key,
                    error=str(result),
                )
            elif result:
                saved += 1
        logger.info("Autosave completed", bindings=len(bindings), saved=saved)
        return saved

    async def _run_scheduled_autosave(self) -> None:
        try:
            await self.autosave_tick()
        except Exception as e:
            logger.error("Scheduled autosave failed", error=str(e))

    async def finalize_all(self) -> int:
        """Finalize every registered binding; returns how many left the registry."""
        if not self._settings.saves_enabled:
            logger.info("Saves disabled in this environment; skipping final flush")
            return 0

        bindings = self._registry.snapshot()
        results = await asyncio.gather(
            *(binding.finalize() for binding in bindings), return_exceptions=True
        )
        finalized = 0
        for binding, result in zip(bindings, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Finalize failed",
                    store_name=binding.store_name,
                    master_key=binding.master_key,
                    error=str(result),
                )
            elif result:
                finalized += 1
        logger.info(
            "Final flush completed",
            bindings=len(bindings),
            finalized=finalized,
            remaining=len(self._registry),
        )
        return finalized

    def start(self) -> None:
        if not self._settings.autosave_enabled:
            logger.info("Autosave disabled")
            return

        trigger = IntervalTrigger(seconds=self._settings.autosave_interval_seconds)
        self._scheduler.add_job(
            self._run_scheduled_autosave,
            trigger,
            id="autosave",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Autosave scheduler started",
            interval_seconds=self._settings.autosave_interval_seconds,
        )

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Autosave scheduler stopped")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    async def shutdown(self) -> int:
        """Stop the timer and flush every binding; runs at most once."""
        self.stop()
        if self._finalized:
            return 0
        self._finalized = True
        return await self.finalize_all()

    def attach(self, lifecycle: ProcessLifecyclePort) -> None:
        """Subscribe the shutdown flush to the host's terminate notification."""
        if self._attached:
            logger.warning("Autosave scheduler already attached to a lifecycle")
            return
        lifecycle.on_terminate(self.shutdown)
        self._attached = True
