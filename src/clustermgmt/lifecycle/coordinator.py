"""
Lifecycle coordinator for managed resources.

Deploy and remove requests are admitted synchronously: the cluster is looked
up, then the state store decides atomically whether the identity may start a
new operation. Accepted operations run as background asyncio tasks and report
their outcome back to the store. Provisioner failures are recorded on the
entry and never raised to the caller that started the operation.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import cast

import structlog

from clustermgmt.clusters.base import ClusterRegistry
from clustermgmt.core.errors import (
    AlreadyExistsError,
    InProgressError,
    NotFoundError,
    ValidationError,
)
from clustermgmt.domain.models import ManagedResource, ManagedResourceEntry, ResourceIdentity
from clustermgmt.lifecycle.store import AdmissionOutcome, CompletionOutcome, ResourceStateStore
from clustermgmt.logging import bind_resource_context
from clustermgmt.provisioners.registry import ProvisionerRegistry

logger = structlog.get_logger()


class Operation(StrEnum):
    deploy = "deploy"
    remove = "remove"


def _require_non_empty(**values: str) -> None:
    for field, value in values.items():
        if not value:
            raise ValidationError(f"{field} must be a non-empty string", details={"field": field})


class LifecycleCoordinator:
    """Accepts deploy/remove requests and tracks managed-resource state."""

    def __init__(
        self,
        clusters: ClusterRegistry,
        provisioners: ProvisionerRegistry,
        store: ResourceStateStore | None = None,
        *,
        provision_timeout: float | None = None,
    ) -> None:
        self._clusters = clusters
        self._provisioners = provisioners
        self._store = store if store is not None else ResourceStateStore()
        self._timeout = provision_timeout
        self._tasks: dict[asyncio.Task[None], tuple[ManagedResourceEntry, Operation]] = {}

    @property
    def pending_operations(self) -> int:
        return len(self._tasks)

    @property
    def provisioners(self) -> ProvisionerRegistry:
        return self._provisioners

    async def deploy_managed_resource(
        self, environment: str, cluster: str, resource: ManagedResource
    ) -> ManagedResourceEntry:
        """Admit a deploy request and start provisioning in the background.

        Raises:
            NotFoundError: the cluster does not exist
            UnknownKindError: no provisioner handles ``resource.kind``
            InProgressError: a create or delete is outstanding for the resource
            AlreadyExistsError: the resource is already active
        """
        _require_non_empty(environment=environment, cluster=cluster, name=resource.name)
        log = bind_resource_context(environment, cluster, resource.name, kind=resource.kind)

        await self._require_cluster(environment, cluster, log)
        self._provisioners.get(resource.kind)  # unknown kinds fail before any state change

        identity = ResourceIdentity(environment, cluster, resource.name)
        result = self._store.try_begin_create(identity, resource.spec, resource.kind)

        if result.outcome is AdmissionOutcome.in_progress:
            log.info("managed_resource_deploy_rejected", reason="in_progress")
            raise InProgressError(
                f"ManagedResource [{resource.name}] has an operation in progress.",
                details={"status": result.entry.status.value if result.entry else None},
            )
        if result.outcome is AdmissionOutcome.already_exists:
            log.info("managed_resource_deploy_rejected", reason="already_exists")
            raise AlreadyExistsError(f"ManagedResource [{resource.name}] already exists.")

        entry = cast(ManagedResourceEntry, result.entry)
        log.info("managed_resource_deploy_accepted", operation_id=entry.operation_id)
        self._launch(entry, Operation.deploy)
        return entry

    async def remove_managed_resource(
        self, environment: str, cluster: str, resource_name: str
    ) -> ManagedResourceEntry:
        """Admit a remove request and start removal in the background.

        A failed entry may be removed; this is the cleanup path for resources
        whose deploy or earlier removal failed.

        Raises:
            NotFoundError: the cluster or the managed resource does not exist
            InProgressError: a create or delete is outstanding for the resource
        """
        _require_non_empty(environment=environment, cluster=cluster, resource_name=resource_name)
        log = bind_resource_context(environment, cluster, resource_name)

        await self._require_cluster(environment, cluster, log)

        identity = ResourceIdentity(environment, cluster, resource_name)
        result = self._store.try_begin_delete(identity)

        if result.outcome is AdmissionOutcome.not_found:
            log.info("managed_resource_remove_rejected", reason="resource_not_found")
            raise NotFoundError(f"ManagedResource [{resource_name}] not found.")
        if result.outcome is AdmissionOutcome.in_progress:
            log.info("managed_resource_remove_rejected", reason="in_progress")
            raise InProgressError(
                f"ManagedResource [{resource_name}] has an operation in progress.",
                details={"status": result.entry.status.value if result.entry else None},
            )

        entry = cast(ManagedResourceEntry, result.entry)
        log.info("managed_resource_remove_accepted", operation_id=entry.operation_id)
        self._launch(entry, Operation.remove)
        return entry

    async def get_managed_resource(
        self, environment: str, cluster: str, resource_name: str
    ) -> ManagedResourceEntry:
        _require_non_empty(environment=environment, cluster=cluster, resource_name=resource_name)

        entry = self._store.get_or_absent(ResourceIdentity(environment, cluster, resource_name))
        if entry is not None:
            return entry

        reason = await self._diagnose_miss(environment, cluster)
        log = bind_resource_context(environment, cluster, resource_name)
        log.debug("managed_resource_lookup_missed", reason=reason)
        raise NotFoundError(f"ManagedResource [{resource_name}] not found.")

    async def get_managed_resources(
        self, environment: str, cluster: str
    ) -> list[ManagedResourceEntry]:
        _require_non_empty(environment=environment, cluster=cluster)
        log = bind_resource_context(environment, cluster)
        await self._require_cluster(environment, cluster, log)
        return self._store.list_by_cluster(environment, cluster)

    async def wait_idle(self) -> None:
        """Wait until every in-flight provisioning operation has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight operations; their entries are recorded as failed."""
        pending = dict(self._tasks)
        for task in pending:
            task.cancel()
        if not pending:
            return

        await asyncio.gather(*pending, return_exceptions=True)
        for task, (entry, operation) in pending.items():
            if task.cancelled():
                self._store.complete(
                    entry.identity,
                    CompletionOutcome.failed(f"{operation} cancelled"),
                    operation_id=entry.operation_id,
                )
        logger.info("lifecycle_coordinator_closed", cancelled=len(pending))

    async def _require_cluster(
        self, environment: str, cluster: str, log: structlog.stdlib.BoundLogger
    ) -> None:
        if not await self._clusters.exists(environment, cluster):
            log.info("cluster_lookup_failed", reason="cluster_not_found")
            raise NotFoundError(f"Cluster [{cluster}] not found in environment [{environment}].")

    async def _diagnose_miss(self, environment: str, cluster: str) -> str:
        try:
            found = await self._clusters.exists(environment, cluster)
        except Exception as exc:
            # the caller answers 404 regardless; the registry error is only logged
            logger.warning(
                "cluster_lookup_error",
                environment=environment,
                cluster=cluster,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return "cluster_lookup_error"
        return "resource_not_found" if found else "cluster_not_found"

    def _launch(self, entry: ManagedResourceEntry, operation: Operation) -> None:
        # the provisioner works on its own copy of what the caller was handed back
        entry = entry.model_copy(deep=True)
        task = asyncio.create_task(
            self._run(entry, operation), name=f"{operation}:{entry.identity}"
        )
        self._tasks[task] = (entry, operation)
        task.add_done_callback(self._discard)

    def _discard(self, task: asyncio.Task[None]) -> None:
        self._tasks.pop(task, None)

    async def _run(self, entry: ManagedResourceEntry, operation: Operation) -> None:
        identity = entry.identity
        log = bind_resource_context(
            identity.environment,
            identity.cluster,
            identity.name,
            kind=entry.kind,
            operation=operation.value,
            operation_id=entry.operation_id,
        )

        try:
            provisioner = self._provisioners.get(entry.kind)
            if operation is Operation.deploy:
                work = provisioner.deploy(entry)
            else:
                work = provisioner.remove(entry)
            if self._timeout is None:
                await work
            else:
                await asyncio.wait_for(work, self._timeout)
        except asyncio.CancelledError:
            log.warning("managed_resource_provision_cancelled")
            raise
        except asyncio.TimeoutError:
            suffix = f" after {self._timeout}s" if self._timeout is not None else ""
            outcome = CompletionOutcome.failed(f"{operation} timed out{suffix}")
            log.error("managed_resource_provision_failed", error=outcome.error)
        except Exception as exc:
            outcome = CompletionOutcome.failed(str(exc) or type(exc).__name__)
            log.error(
                "managed_resource_provision_failed",
                error=outcome.error,
                error_type=type(exc).__name__,
            )
        else:
            if operation is Operation.deploy:
                outcome = CompletionOutcome.activated()
            else:
                outcome = CompletionOutcome.deleted()

        if self._store.complete(identity, outcome, operation_id=entry.operation_id):
            log.info("managed_resource_transitioned", status=outcome.status.value)
