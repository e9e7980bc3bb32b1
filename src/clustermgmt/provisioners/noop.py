from __future__ import annotations

import asyncio

import structlog

from clustermgmt.domain.models import ManagedResourceEntry

logger = structlog.get_logger()


class NoopProvisioner:
    """Provisioner that succeeds without touching any infrastructure.

    Useful for local development and for kinds whose lifecycle is tracked
    only for bookkeeping.
    """

    def __init__(self, delay_seconds: float = 0.0) -> None:
        self._delay = delay_seconds

    async def deploy(self, entry: ManagedResourceEntry) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        logger.info("noop_deploy", identity=str(entry.identity), kind=entry.kind)

    async def remove(self, entry: ManagedResourceEntry) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        logger.info("noop_remove", identity=str(entry.identity), kind=entry.kind)
