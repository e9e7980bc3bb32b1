from __future__ import annotations

from typing import Protocol

from clustermgmt.domain.models import ManagedResourceEntry


class ResourceProvisioner(Protocol):
    """Contract for the component that deploys and removes one resource kind.

    Returning normally means the operation succeeded. Raising (typically
    ProvisionerError) means it failed; the coordinator records the error on
    the entry.
    """

    async def deploy(self, entry: ManagedResourceEntry) -> None:
        ...

    async def remove(self, entry: ManagedResourceEntry) -> None:
        ...
