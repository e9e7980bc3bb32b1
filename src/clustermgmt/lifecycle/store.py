"""
Authoritative in-memory state of every managed resource.

The store is a mapping from ResourceIdentity to a frozen ManagedResourceEntry.
Every "inspect status, decide, transition" sequence runs under a single lock,
so two concurrent creates for the same identity can never both observe an
empty slot. Entries never leave the store by reference: callers get deep
copies, so mutating a returned spec cannot change the recorded state.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from uuid import uuid4

import structlog

from clustermgmt.domain.models import (
    ManagedResourceEntry,
    ResourceIdentity,
    ResourceStatus,
    utcnow,
)

logger = structlog.get_logger()


class AdmissionOutcome(StrEnum):
    accepted = "accepted"
    in_progress = "in_progress"
    already_exists = "already_exists"
    not_found = "not_found"


@dataclass(frozen=True, slots=True)
class BeginResult:
    """Decision taken by try_begin_create / try_begin_delete."""

    outcome: AdmissionOutcome
    entry: ManagedResourceEntry | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is AdmissionOutcome.accepted


@dataclass(frozen=True, slots=True)
class CompletionOutcome:
    """Result reported by background provisioning work."""

    status: ResourceStatus
    error: str | None = None

    @classmethod
    def activated(cls) -> CompletionOutcome:
        return cls(ResourceStatus.active)

    @classmethod
    def deleted(cls) -> CompletionOutcome:
        return cls(ResourceStatus.absent)

    @classmethod
    def failed(cls, error: str) -> CompletionOutcome:
        return cls(ResourceStatus.failed, error)


# completion status -> transitional states it may be applied to
_COMPLETABLE_FROM: dict[ResourceStatus, tuple[ResourceStatus, ...]] = {
    ResourceStatus.active: (ResourceStatus.creating,),
    ResourceStatus.absent: (ResourceStatus.deleting,),
    ResourceStatus.failed: (ResourceStatus.creating, ResourceStatus.deleting),
}


def _snapshot(entry: ManagedResourceEntry) -> ManagedResourceEntry:
    return entry.model_copy(deep=True)


class ResourceStateStore:
    """Lifecycle state keyed by (environment, cluster, name)."""

    def __init__(self) -> None:
        self._entries: dict[ResourceIdentity, ManagedResourceEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_absent(self, identity: ResourceIdentity) -> ManagedResourceEntry | None:
        with self._lock:
            entry = self._entries.get(identity)
            return _snapshot(entry) if entry is not None else None

    def list_by_cluster(self, environment: str, cluster: str) -> list[ManagedResourceEntry]:
        with self._lock:
            return [
                _snapshot(entry)
                for key, entry in self._entries.items()
                if key.environment == environment and key.cluster == cluster
            ]

    def try_begin_create(
        self,
        identity: ResourceIdentity,
        spec: dict[str, Any],
        kind: str,
    ) -> BeginResult:
        with self._lock:
            current = self._entries.get(identity)
            if current is not None:
                if current.status.in_progress:
                    return BeginResult(AdmissionOutcome.in_progress, _snapshot(current))
                if current.status is ResourceStatus.active:
                    return BeginResult(AdmissionOutcome.already_exists, _snapshot(current))

            # no entry, or a failed one: start fresh
            now = utcnow()
            entry = ManagedResourceEntry(
                environment=identity.environment,
                cluster=identity.cluster,
                name=identity.name,
                kind=kind,
                spec=copy.deepcopy(spec),
                status=ResourceStatus.creating,
                created_at=now,
                updated_at=now,
                operation_id=uuid4().hex,
            )
            self._entries[identity] = entry
            return BeginResult(AdmissionOutcome.accepted, _snapshot(entry))

    def try_begin_delete(self, identity: ResourceIdentity) -> BeginResult:
        with self._lock:
            current = self._entries.get(identity)
            if current is None:
                return BeginResult(AdmissionOutcome.not_found)
            if current.status.in_progress:
                return BeginResult(AdmissionOutcome.in_progress, _snapshot(current))

            entry = current.transition(ResourceStatus.deleting, operation_id=uuid4().hex)
            self._entries[identity] = entry
            return BeginResult(AdmissionOutcome.accepted, _snapshot(entry))

    def complete(
        self,
        identity: ResourceIdentity,
        outcome: CompletionOutcome,
        *,
        operation_id: str | None = None,
    ) -> bool:
        """Apply the outcome of a provisioning operation.

        Returns False when the outcome no longer applies: the entry is gone,
        belongs to a different operation, or is not in the transitional
        state the outcome completes.
        """
        with self._lock:
            current = self._entries.get(identity)
            if current is None:
                logger.warning(
                    "completion_ignored", identity=str(identity), reason="entry_missing"
                )
                return False
            if operation_id is not None and current.operation_id != operation_id:
                logger.warning(
                    "completion_ignored",
                    identity=str(identity),
                    reason="stale_operation",
                    operation_id=operation_id,
                    current_operation_id=current.operation_id,
                )
                return False
            if current.status not in _COMPLETABLE_FROM[outcome.status]:
                logger.warning(
                    "completion_ignored",
                    identity=str(identity),
                    reason="unexpected_status",
                    status=current.status.value,
                    outcome=outcome.status.value,
                )
                return False

            if outcome.status is ResourceStatus.absent:
                del self._entries[identity]
            else:
                self._entries[identity] = current.transition(
                    outcome.status, last_error=outcome.error
                )
            return True
