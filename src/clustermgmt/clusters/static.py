"""
Cluster registry backed by a fixed set of clusters.

The YAML file format is::

    environments:
      prod:
        clusters: [web, api]
      staging:
        clusters:
          - web
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import structlog
import yaml

from clustermgmt.core.errors import ConfigurationError

logger = structlog.get_logger()


class StaticClusterRegistry:
    def __init__(self, clusters: Iterable[tuple[str, str]] = ()) -> None:
        self._clusters: set[tuple[str, str]] = set(clusters)

    def add(self, environment: str, cluster: str) -> None:
        self._clusters.add((environment, cluster))

    def discard(self, environment: str, cluster: str) -> None:
        self._clusters.discard((environment, cluster))

    async def exists(self, environment: str, cluster: str) -> bool:
        return (environment, cluster) in self._clusters

    def __len__(self) -> int:
        return len(self._clusters)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> StaticClusterRegistry:
        environments = data.get("environments") or {}
        if not isinstance(environments, dict):
            raise ConfigurationError("'environments' must be a mapping")

        registry = cls()
        for env_name, env_data in environments.items():
            clusters = (env_data or {}).get("clusters") or []
            if not isinstance(clusters, list):
                raise ConfigurationError(
                    f"Clusters for environment [{env_name}] must be a list",
                    details={"environment": env_name},
                )
            for cluster in clusters:
                registry.add(str(env_name), str(cluster))
        return registry

    @classmethod
    def from_file(cls, path: str | Path) -> StaticClusterRegistry:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Clusters file not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid clusters file {path}: {exc}") from exc

        registry = cls.from_mapping(data)
        logger.info("clusters_loaded", path=str(path), count=len(registry))
        return registry
