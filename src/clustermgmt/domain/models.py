from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResourceStatus(StrEnum):
    """Lifecycle states of a managed resource.

    ``absent`` is never stored. It is what queries report for an identity
    with no entry.
    """

    creating = "creating"
    active = "active"
    deleting = "deleting"
    failed = "failed"
    absent = "absent"

    @property
    def in_progress(self) -> bool:
        return self in (ResourceStatus.creating, ResourceStatus.deleting)


@dataclass(frozen=True, slots=True)
class ResourceIdentity:
    """Unique key of a managed resource within the store."""

    environment: str
    cluster: str
    name: str

    def location(self, prefix: str = "") -> str:
        """URL path of the resource, each segment percent-encoded."""
        environment, cluster, name = (
            quote(part, safe="") for part in (self.environment, self.cluster, self.name)
        )
        return f"{prefix}/environment/{environment}/cluster/{cluster}/resource/{name}"

    def __str__(self) -> str:
        return f"{self.environment}/{self.cluster}/{self.name}"


class ManagedResource(BaseModel):
    """A managed resource as submitted by a caller."""

    name: str = Field(min_length=1)
    kind: str = Field(min_length=1)
    spec: dict[str, Any] = Field(default_factory=dict)


class ManagedResourceEntry(BaseModel):
    """Stored lifecycle record for one managed resource identity.

    Entries are frozen. A transition replaces the stored object, so readers
    always see a consistent status/error/timestamp tuple.
    """

    model_config = ConfigDict(frozen=True)

    environment: str
    cluster: str
    name: str
    kind: str
    spec: dict[str, Any] = Field(default_factory=dict)
    status: ResourceStatus
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_error: str | None = None
    operation_id: str | None = None

    @property
    def identity(self) -> ResourceIdentity:
        return ResourceIdentity(self.environment, self.cluster, self.name)

    def transition(
        self,
        status: ResourceStatus,
        *,
        last_error: str | None = None,
        operation_id: str | None = None,
    ) -> ManagedResourceEntry:
        """Return a copy of this entry moved to ``status``."""
        return self.model_copy(
            update={
                "status": status,
                "updated_at": utcnow(),
                "last_error": last_error,
                "operation_id": operation_id or self.operation_id,
            }
        )
