from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clustermgmt import __version__
from clustermgmt.api.errors import register_exception_handlers
from clustermgmt.api.routes import health, resources
from clustermgmt.config import (
    Settings,
    build_cluster_registry,
    build_provisioner_registry,
    get_settings,
)
from clustermgmt.lifecycle import LifecycleCoordinator
from clustermgmt.logging import configure_logging


def build_coordinator(settings: Settings) -> LifecycleCoordinator:
    return LifecycleCoordinator(
        build_cluster_registry(settings),
        build_provisioner_registry(settings),
        provision_timeout=settings.provision_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(app.state.settings.log_level)
    yield
    await app.state.coordinator.aclose()


def create_app(
    settings: Settings | None = None,
    coordinator: LifecycleCoordinator | None = None,
) -> FastAPI:
    explicit_settings = settings is not None
    settings = settings or get_settings()

    app = FastAPI(
        title="Cluster Management API",
        version=__version__,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.coordinator = coordinator or build_coordinator(settings)
    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.cors_origins],
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
        )

    register_exception_handlers(app)
    app.include_router(resources.router, prefix=settings.api_prefix, tags=["managed-resources"])
    app.include_router(health.router, tags=["health"])
    return app


app = create_app()

try:
    from mangum import Mangum

    handler: Mangum | None = Mangum(app)
except ImportError:  # pragma: no cover
    handler = None
