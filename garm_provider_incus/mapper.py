"""Conversion from Incus instances to GARM provider instances."""

import logging

from .instance import HypervisorInstance
from .models import INCUS_TO_GARM_ARCH, PUBLIC_ADDRESS, Address, ProviderInstance

logger = logging.getLogger(__name__)


def incus_arch_to_garm_arch(arch: str) -> str:
    """Map an Incus architecture name to GARM's. Unknown names pass through."""
    arch = arch or ""
    mapped = INCUS_TO_GARM_ARCH.get(arch)
    if mapped is None:
        if arch:
            logger.warning(f"Unmapped architecture {arch!r}, passing through")
        return arch
    return mapped


def _addresses(instance: HypervisorInstance) -> list[Address]:
    network = instance.network or {}
    # Interfaces are sorted so the output order does not depend on the API's map order
    return [
        Address(address=addr.address or "", type=PUBLIC_ADDRESS)
        for iface in sorted(network)
        for addr in network[iface] or []
    ]


def incus_instance_to_provider_instance(instance: HypervisorInstance) -> ProviderInstance:
    """Convert an Incus instance to GARM's normalized instance record.

    Pure and total: absent config keys or network state produce empty values.

    Raises:
        TypeError: If instance is None
    """
    if instance is None:
        raise TypeError("instance must not be None")

    config = instance.config
    return ProviderInstance(
        provider_id=instance.name,
        name=instance.name,
        os_type=config.os_type,
        os_name=config.os_name,
        os_version=config.os_version,
        os_arch=incus_arch_to_garm_arch(instance.architecture),
        addresses=_addresses(instance),
        status=(instance.status or "").lower(),
    )
