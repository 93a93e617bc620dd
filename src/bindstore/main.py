"""Composition Root + DI wiring."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import structlog

from bindstore.config import Settings
from bindstore.exceptions import ConfigurationError
from bindstore.gateway.memory_store_gateway import MemoryStoreGateway
from bindstore.gateway.redis_store_gateway import RedisStoreGateway
from bindstore.gateway.signal_lifecycle import SignalLifecycle
from bindstore.gateway.store_directory import StoreDirectory
from bindstore.port.lifecycle_port import ProcessLifecyclePort
from bindstore.usecase.binding_service import BindingService
from bindstore.utils.logging import configure_logging

logger = structlog.get_logger()


def build_store_directory(
    settings: Settings,
) -> tuple[StoreDirectory, Optional["redis.Redis"]]:
    """Pick the remote store implementation named by the settings."""
    if settings.store_backend == "memory":
        return StoreDirectory(MemoryStoreGateway), None

    if settings.store_backend == "redis":
        client = redis.Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
        )

        def open_store(store_name: str) -> RedisStoreGateway:
            return RedisStoreGateway(client, store_name, key_prefix=settings.redis_key_prefix)

        return StoreDirectory(open_store), client

    raise ConfigurationError(f"Unknown store backend: {settings.store_backend!r}")


@asynccontextmanager
async def lifespan(
    settings: Optional[Settings] = None,
    lifecycle: Optional[ProcessLifecyclePort] = None,
    configure_logs: bool = True,
) -> AsyncIterator[BindingService]:
    """Wire all layers, start autosave, and flush every binding on exit."""
    settings = settings or Settings()
    if configure_logs:
        configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    logger.info(
        "Starting bindstore",
        environment=settings.environment,
        store_backend=settings.store_backend,
        saves_enabled=settings.saves_enabled,
    )

    # --- Gateway layer ---
    stores, client = build_store_directory(settings)

    # --- Usecase layer ---
    service = BindingService(settings, stores)

    # --- Scheduler ---
    service.scheduler.start()
    if lifecycle is not None:
        service.scheduler.attach(lifecycle)

    logger.info("bindstore started successfully")

    try:
        yield service
    finally:
        # --- Shutdown ---
        logger.info("Shutting down bindstore", live_bindings=len(service.registry))
        await service.scheduler.shutdown()
        await stores.close_all()
        if client is not None:
            await client.aclose()
        logger.info("bindstore stopped")


async def serve(settings: Optional[Settings] = None) -> None:
    """Keep a service running until SIGTERM/SIGINT, then flush and exit."""
    lifecycle = SignalLifecycle()
    lifecycle.install()
    try:
        async with lifespan(settings, lifecycle):
            await lifecycle.wait()
    finally:
        lifecycle.close()


def run() -> None:
    """Run the service until the process is told to terminate."""
    asyncio.run(serve())


if __name__ == "__main__":
    run()
