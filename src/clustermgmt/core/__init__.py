"""Core modules for clustermgmt - centralized error definitions."""

from clustermgmt.core.errors import (
    AlreadyExistsError,
    ClusterMgmtError,
    ClusterRegistryError,
    ConfigurationError,
    InProgressError,
    NotFoundError,
    ProvisionerError,
    UnknownKindError,
    ValidationError,
    format_error_message,
)

__all__ = [
    "ClusterMgmtError",
    "NotFoundError",
    "InProgressError",
    "AlreadyExistsError",
    "ValidationError",
    "UnknownKindError",
    "ConfigurationError",
    "ProvisionerError",
    "ClusterRegistryError",
    "format_error_message",
]
