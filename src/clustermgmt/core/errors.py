"""
Unified error handling for clustermgmt.

Request-time errors are raised synchronously by the lifecycle coordinator
and mapped to HTTP status codes at the API boundary:

- NotFoundError: 404, cluster or managed resource does not exist
- InProgressError: 409, a create or delete is already in flight
- AlreadyExistsError: 409, an active resource already exists
- ValidationError: 422, malformed arguments or unknown resource kind
- ClusterRegistryError: 502, the cluster registry could not be consulted

ProvisionerError is never raised to a request caller. Provisioners raise it
from background work and the coordinator records it on the entry.
"""

from __future__ import annotations

from typing import Any


class ClusterMgmtError(Exception):
    """Base exception for clustermgmt errors with HTTP status support."""

    http_status: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ClusterMgmtError):
    """Raised when a cluster or managed resource does not exist."""

    http_status = 404


class InProgressError(ClusterMgmtError):
    """Raised when a create or delete is already outstanding for a resource."""

    http_status = 409


class AlreadyExistsError(ClusterMgmtError):
    """Raised when creating a resource that is already active."""

    http_status = 409


class ValidationError(ClusterMgmtError):
    """Raised for validation failures."""

    http_status = 422


class UnknownKindError(ValidationError):
    """Raised when no provisioner is registered for a resource kind."""


class ConfigurationError(ClusterMgmtError):
    """Raised for configuration-related errors."""

    http_status = 500


class ClusterRegistryError(ClusterMgmtError):
    """Raised when the cluster registry cannot answer an existence query."""

    http_status = 502


class ProvisionerError(ClusterMgmtError):
    """Raised by provisioners when a deploy or remove fails."""


def format_error_message(error: ClusterMgmtError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
