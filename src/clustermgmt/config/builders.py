from __future__ import annotations

import structlog

from clustermgmt.clusters import ClusterRegistry, HttpClusterRegistry, StaticClusterRegistry
from clustermgmt.config.settings import Settings
from clustermgmt.provisioners import NoopProvisioner, ProvisionerRegistry, WebhookProvisioner

logger = structlog.get_logger()


def build_cluster_registry(settings: Settings) -> ClusterRegistry:
    if settings.cluster_registry_url:
        logger.info(
            "cluster_registry_configured", backend="http", url=settings.cluster_registry_url
        )
        return HttpClusterRegistry(
            settings.cluster_registry_url,
            timeout=settings.http_timeout,
            max_retries=settings.http_max_retries,
            backoff_factor=settings.http_retry_backoff_factor,
            token=settings.cluster_registry_token,
        )
    if settings.clusters_file:
        return StaticClusterRegistry.from_file(settings.clusters_file)

    logger.warning("cluster_registry_empty", reason="No cluster registry configured")
    return StaticClusterRegistry()


def build_provisioner_registry(settings: Settings) -> ProvisionerRegistry:
    registry = ProvisionerRegistry()

    noop = NoopProvisioner(delay_seconds=settings.noop_provisioner_delay_seconds)
    for kind in settings.noop_provisioner_kinds:
        registry.register(kind, noop, description="No-op provisioner")

    for kind, url in settings.webhook_provisioners.items():
        registry.register(
            kind,
            WebhookProvisioner(
                url,
                timeout=settings.http_timeout,
                max_retries=settings.http_max_retries,
                backoff_factor=settings.http_retry_backoff_factor,
                token=settings.webhook_token,
            ),
            description=f"Webhook provisioner at {url}",
        )

    logger.info("provisioners_registered", kinds=registry.kinds())
    return registry
