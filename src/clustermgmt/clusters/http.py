from __future__ import annotations

from urllib.parse import quote

from circuitbreaker import CircuitBreakerError

from clustermgmt.clients.base import BaseHTTPClient, PermanentHTTPError, RetryableHTTPError
from clustermgmt.core.errors import ClusterRegistryError


class HttpClusterRegistry(BaseHTTPClient):
    """Looks clusters up in a remote cluster management API.

    ``GET {base_url}/environment/{env}/cluster/{cluster}`` answering 200 means
    the cluster exists and 404 means it does not.
    """

    async def exists(self, environment: str, cluster: str) -> bool:
        path = f"/environment/{quote(environment, safe='')}/cluster/{quote(cluster, safe='')}"
        try:
            await self.get(path)
        except PermanentHTTPError as exc:
            if exc.status_code == 404:
                return False
            raise ClusterRegistryError(
                f"Cluster lookup failed: {exc}",
                details={"environment": environment, "cluster": cluster},
            ) from exc
        except (RetryableHTTPError, CircuitBreakerError) as exc:
            raise ClusterRegistryError(
                f"Cluster registry unavailable: {exc}",
                details={"environment": environment, "cluster": cluster},
            ) from exc
        return True
