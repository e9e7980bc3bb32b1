from __future__ import annotations

from typing import Protocol


class ClusterRegistry(Protocol):
    """Answers whether a cluster exists within an environment."""

    async def exists(self, environment: str, cluster: str) -> bool:
        ...
