"""Root test configuration."""

import asyncio
import logging

import pytest
import pytest_asyncio
import structlog
from clustermgmt.clusters import StaticClusterRegistry
from clustermgmt.core.errors import ProvisionerError
from clustermgmt.lifecycle import LifecycleCoordinator, ResourceStateStore
from clustermgmt.provisioners import ProvisionerRegistry


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class GatedProvisioner:
    """Provisioner whose operations block until the test releases them."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self._gates: dict[tuple[str, str], asyncio.Event] = {}
        self._failures: dict[tuple[str, str], str] = {}

    def _gate(self, action: str, name: str) -> asyncio.Event:
        return self._gates.setdefault((action, name), asyncio.Event())

    def release(self, action: str, name: str, *, error: str | None = None) -> None:
        """Let the next ``action`` on ``name`` finish, failing with ``error`` if given."""
        if error is not None:
            self._failures[(action, name)] = error
        self._gate(action, name).set()

    async def _run(self, action: str, entry) -> None:
        self.calls.append((action, entry.name))
        await self._gate(action, entry.name).wait()
        self._gates.pop((action, entry.name), None)
        error = self._failures.pop((action, entry.name), None)
        if error is not None:
            raise ProvisionerError(error)

    async def deploy(self, entry) -> None:
        await self._run("deploy", entry)

    async def remove(self, entry) -> None:
        await self._run("remove", entry)


@pytest.fixture
def provisioner() -> GatedProvisioner:
    return GatedProvisioner()


@pytest.fixture
def clusters() -> StaticClusterRegistry:
    return StaticClusterRegistry([("prod", "web"), ("prod", "api"), ("staging", "web")])


@pytest.fixture
def store() -> ResourceStateStore:
    return ResourceStateStore()


@pytest_asyncio.fixture
async def coordinator(clusters, provisioner, store):
    registry = ProvisionerRegistry()
    registry.register("nginx", provisioner)
    registry.register("calico", provisioner)
    coordinator = LifecycleCoordinator(clusters, registry, store)
    yield coordinator
    await coordinator.aclose()
