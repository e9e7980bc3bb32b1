"""Managed-resource lifecycle service for clusters within named environments."""

__version__ = "0.1.0"
