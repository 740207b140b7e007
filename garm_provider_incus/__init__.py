"""GARM external provider for Incus."""

from .client import IncusClient, get_client_from_config
from .config import IncusConfig
from .mapper import incus_instance_to_provider_instance
from .provider import IncusProvider

__all__ = [
    "IncusClient",
    "IncusConfig",
    "IncusProvider",
    "get_client_from_config",
    "incus_instance_to_provider_instance",
]
