"""Managed-resource lifecycle: state store and coordinator."""

from clustermgmt.lifecycle.coordinator import LifecycleCoordinator
from clustermgmt.lifecycle.store import (
    AdmissionOutcome,
    BeginResult,
    CompletionOutcome,
    ResourceStateStore,
)

__all__ = [
    "AdmissionOutcome",
    "BeginResult",
    "CompletionOutcome",
    "LifecycleCoordinator",
    "ResourceStateStore",
]
