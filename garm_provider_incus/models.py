"""Normalized instance models returned to GARM."""

from pydantic import BaseModel

PUBLIC_ADDRESS = "public"

# Incus architecture names -> GARM architecture names.
INCUS_TO_GARM_ARCH = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "armv7l": "arm",
}


class Address(BaseModel):
    """An address GARM can reach the instance on."""
    address: str
    type: str = PUBLIC_ADDRESS


class ProviderInstance(BaseModel):
    """Provider-agnostic instance record."""
    provider_id: str
    name: str
    os_type: str = ""
    os_name: str = ""
    os_version: str = ""
    os_arch: str = ""
    addresses: list[Address] = []
    status: str = ""
