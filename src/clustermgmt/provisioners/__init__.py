"""Pluggable provisioners and the kind-keyed registry that selects them."""

from clustermgmt.provisioners.base import ResourceProvisioner
from clustermgmt.provisioners.noop import NoopProvisioner
from clustermgmt.provisioners.registry import ProvisionerRegistry, ProvisionerSpec
from clustermgmt.provisioners.webhook import WebhookProvisioner

__all__ = [
    "NoopProvisioner",
    "ProvisionerRegistry",
    "ProvisionerSpec",
    "ResourceProvisioner",
    "WebhookProvisioner",
]
