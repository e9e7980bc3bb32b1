from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from clustermgmt.core.errors import UnknownKindError
from clustermgmt.provisioners.base import ResourceProvisioner


@dataclass(frozen=True)
class ProvisionerSpec:
    """Metadata describing a registered provisioner."""

    kind: str
    provisioner: ResourceProvisioner
    description: str | None = None


class ProvisionerRegistry:
    """In-memory registry of provisioners keyed by resource kind."""

    def __init__(self) -> None:
        self._provisioners: Dict[str, ProvisionerSpec] = {}

    def register(
        self,
        kind: str,
        provisioner: ResourceProvisioner,
        *,
        description: str | None = None,
    ) -> None:
        if not kind:
            raise ValueError("Resource kind is required")
        self._provisioners[kind] = ProvisionerSpec(
            kind=kind,
            provisioner=provisioner,
            description=description,
        )

    def get(self, kind: str) -> ResourceProvisioner:
        spec = self._provisioners.get(kind)
        if spec is None:
            raise UnknownKindError(
                f"No provisioner registered for kind [{kind}]",
                details={"kind": kind},
            )
        return spec.provisioner

    def __contains__(self, kind: object) -> bool:
        return kind in self._provisioners

    def kinds(self) -> List[str]:
        return sorted(self._provisioners)

    def list(self) -> List[ProvisionerSpec]:
        return list(self._provisioners.values())
