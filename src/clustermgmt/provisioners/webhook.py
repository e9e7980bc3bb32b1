from __future__ import annotations

import structlog
from circuitbreaker import CircuitBreakerError

from clustermgmt.clients.base import BaseHTTPClient, PermanentHTTPError, RetryableHTTPError
from clustermgmt.core.errors import ProvisionerError
from clustermgmt.domain.models import ManagedResourceEntry

logger = structlog.get_logger()


class WebhookProvisioner(BaseHTTPClient):
    """Delegates deploy/remove work to an external HTTP endpoint.

    The entry is POSTed as JSON to ``{base_url}/deploy`` or
    ``{base_url}/remove``. Any 2xx response counts as success.
    """

    async def deploy(self, entry: ManagedResourceEntry) -> None:
        await self._call("/deploy", entry)

    async def remove(self, entry: ManagedResourceEntry) -> None:
        await self._call("/remove", entry)

    async def _call(self, path: str, entry: ManagedResourceEntry) -> None:
        payload = entry.model_dump(mode="json", exclude={"last_error"})
        try:
            await self.post(path, json=payload)
        except (PermanentHTTPError, RetryableHTTPError, CircuitBreakerError) as exc:
            logger.warning(
                "webhook_provisioner_failed",
                url=f"{self.base_url}{path}",
                identity=str(entry.identity),
                error=str(exc),
            )
            raise ProvisionerError(
                f"Webhook {path.lstrip('/')} failed for [{entry.identity}]: {exc}",
                details={"kind": entry.kind},
            ) from exc
