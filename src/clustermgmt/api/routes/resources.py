from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Path, Response, status

from clustermgmt.api.auth import require_admin
from clustermgmt.api.deps import get_coordinator
from clustermgmt.config import Settings, get_settings
from clustermgmt.domain.models import ManagedResource, ManagedResourceEntry, ResourceIdentity
from clustermgmt.lifecycle import LifecycleCoordinator

router = APIRouter(prefix="/environment/{env_name}/cluster/{cluster_name}/resource")
logger = structlog.get_logger()

EnvName = Annotated[str, Path(min_length=1, description="Environment name")]
ClusterName = Annotated[str, Path(min_length=1, description="Cluster name")]
ResourceName = Annotated[str, Path(min_length=1, description="Managed resource name")]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ManagedResourceEntry,
    responses={
        404: {"description": "Cluster not found"},
        409: {"description": "In progress or already exists"},
    },
)
async def create_managed_resource(
    payload: ManagedResource,
    response: Response,
    env_name: EnvName,
    cluster_name: ClusterName,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
    user: dict[str, Any] = Depends(require_admin),  # noqa: B008
) -> ManagedResourceEntry:
    """Start deploying a managed resource to a cluster.

    The resource is accepted, not yet deployed: poll the Location to observe
    it move from ``creating`` to ``active`` or ``failed``.
    """
    logger.debug(
        "action_create_managed_resource",
        environment=env_name,
        cluster=cluster_name,
        resource=payload.name,
        requested_by=user.get("sub"),
    )
    location = ResourceIdentity(env_name, cluster_name, payload.name).location(settings.api_prefix)
    entry = await coordinator.deploy_managed_resource(env_name, cluster_name, payload)
    response.headers["Location"] = location
    return entry


@router.delete(
    "/{resource_name}",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ManagedResourceEntry,
    responses={
        404: {"description": "Cluster or resource not found"},
        409: {"description": "In progress"},
    },
)
async def delete_managed_resource(
    response: Response,
    env_name: EnvName,
    cluster_name: ClusterName,
    resource_name: ResourceName,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
    user: dict[str, Any] = Depends(require_admin),  # noqa: B008
) -> ManagedResourceEntry:
    """Start removing a managed resource from a cluster."""
    logger.debug(
        "action_delete_managed_resource",
        environment=env_name,
        cluster=cluster_name,
        resource=resource_name,
        requested_by=user.get("sub"),
    )
    location = ResourceIdentity(env_name, cluster_name, resource_name).location(settings.api_prefix)
    entry = await coordinator.remove_managed_resource(env_name, cluster_name, resource_name)
    response.headers["Location"] = location
    return entry


@router.get("/{resource_name}", response_model=ManagedResourceEntry)
async def get_managed_resource(
    env_name: EnvName,
    cluster_name: ClusterName,
    resource_name: ResourceName,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),  # noqa: B008
) -> ManagedResourceEntry:
    return await coordinator.get_managed_resource(env_name, cluster_name, resource_name)


@router.get("", response_model=list[ManagedResourceEntry])
async def get_managed_resources(
    env_name: EnvName,
    cluster_name: ClusterName,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),  # noqa: B008
) -> list[ManagedResourceEntry]:
    return await coordinator.get_managed_resources(env_name, cluster_name)
