"""Cluster registry collaborators."""

from clustermgmt.clusters.base import ClusterRegistry
from clustermgmt.clusters.http import HttpClusterRegistry
from clustermgmt.clusters.static import StaticClusterRegistry

__all__ = ["ClusterRegistry", "HttpClusterRegistry", "StaticClusterRegistry"]
