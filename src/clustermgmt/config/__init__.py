"""
clustermgmt configuration.

Pydantic-based settings (environment variables, .env files) plus builders
that turn settings into the collaborators the lifecycle coordinator needs.
"""

from clustermgmt.config.builders import build_cluster_registry, build_provisioner_registry
from clustermgmt.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "build_cluster_registry",
    "build_provisioner_registry",
]
