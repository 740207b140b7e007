"""Incus instance value objects - the mapper's input side."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

OS_NAME_KEY = "image.os"
OS_VERSION_KEY = "image.release"
OS_TYPE_KEY = "user.os-type"
CONTROLLER_ID_KEY = "user.runner-controller-id"
POOL_ID_KEY = "user.runner-pool-id"


@dataclass(frozen=True)
class InstanceAddress:
    """One address entry from an interface's runtime state."""

    family: str = ""
    address: str = ""
    netmask: str = ""
    scope: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InstanceAddress:
        return cls(
            family=data.get("family", ""),
            address=data.get("address", ""),
            netmask=data.get("netmask", ""),
            scope=data.get("scope", ""),
        )


class InstanceConfig:
    """Typed read access to an instance's expanded config.

    Every accessor returns an empty string when its key is absent.
    """

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values = dict(values or {})

    def _get(self, key: str) -> str:
        return self._values.get(key) or ""

    @property
    def os_name(self) -> str:
        """Distribution name, from image.os."""
        return self._get(OS_NAME_KEY)

    @property
    def os_type(self) -> str:
        """OS family (linux, windows), set by GARM at create time."""
        return self._get(OS_TYPE_KEY)

    @property
    def os_version(self) -> str:
        """Distribution release, from image.release."""
        return self._get(OS_VERSION_KEY)

    @property
    def controller_id(self) -> str:
        return self._get(CONTROLLER_ID_KEY)

    @property
    def pool_id(self) -> str:
        return self._get(POOL_ID_KEY)


@dataclass(frozen=True)
class HypervisorInstance:
    """An Incus instance together with its runtime state.

    Attributes:
        name: Instance name
        architecture: Incus architecture name (e.g. x86_64)
        status: Runtime status as reported by Incus (e.g. Running)
        expanded_config: Instance config with profiles applied
        network: Interface name -> addresses on that interface
    """

    name: str
    architecture: str = ""
    status: str = ""
    expanded_config: dict[str, str] = field(default_factory=dict)
    network: dict[str, list[InstanceAddress]] = field(default_factory=dict)

    @property
    def config(self) -> InstanceConfig:
        return InstanceConfig(self.expanded_config)

    @classmethod
    def from_pylxd(cls, instance: Any, state: Any = None) -> HypervisorInstance:
        """Build from a pylxd Instance and, optionally, its InstanceState.

        Without a state the status falls back to the instance's own status
        and no addresses are reported.
        """
        network = {}
        status = getattr(instance, "status", "") or ""
        if state is not None:
            status = getattr(state, "status", None) or status
            for iface, details in (getattr(state, "network", None) or {}).items():
                network[iface] = [
                    InstanceAddress.from_dict(addr)
                    for addr in (details or {}).get("addresses") or []
                ]

        return cls(
            name=instance.name,
            architecture=getattr(instance, "architecture", "") or "",
            status=status,
            expanded_config=dict(getattr(instance, "expanded_config", None) or {}),
            network=network,
        )
