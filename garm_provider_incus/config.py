"""Configuration value object - Incus connection settings."""

from dataclasses import dataclass, fields
from typing import Any, Mapping
from urllib.parse import urlparse

from .errors import ConfigError

# Credential fields in resolution order, with the labels used in error messages.
CREDENTIAL_FIELDS = (
    ("tls_server_certificate", "TLSServerCert"),
    ("tls_ca", "TLSCA"),
    ("client_certificate", "ClientCertificate"),
    ("client_key", "ClientKey"),
)


@dataclass(frozen=True)
class IncusConfig:
    """Incus connection configuration.

    Credential fields hold either inline PEM content or a path to a PEM file.

    Attributes:
        unix_socket_path: Local Incus socket; takes precedence over url
        url: Remote Incus API endpoint (https)
        client_certificate: Client certificate for remote connections
        client_key: Client key for remote connections
        tls_server_certificate: Server certificate to pin (optional)
        tls_ca: CA used to verify the server (optional)
        project_name: Incus project to operate in (optional)
    """

    unix_socket_path: str = ""
    url: str = ""
    client_certificate: str = ""
    client_key: str = ""
    tls_server_certificate: str = ""
    tls_ca: str = ""
    project_name: str = ""

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "IncusConfig":
        """Build a config from a parsed mapping (e.g. the [incus] TOML table).

        Unknown keys are ignored, missing keys use defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            if key not in known:
                continue
            if not isinstance(value, str):
                raise ConfigError(f"{key} must be a string")
            kwargs[key] = value
        return cls(**kwargs)

    def validate(self) -> None:
        """Check the config describes a usable connection.

        Raises:
            ConfigError: If neither transport is usable
        """
        if self.unix_socket_path:
            return

        if not self.url:
            raise ConfigError("unix_socket_path or url must be specified")

        parsed = urlparse(self.url)
        if parsed.scheme != "https" or not parsed.netloc:
            raise ConfigError(f"url must be an https URL: {self.url}")

        if not self.client_certificate or not self.client_key:
            raise ConfigError("client_certificate and client_key are mandatory for remote connections")
