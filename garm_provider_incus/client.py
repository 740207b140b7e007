"""Incus client construction.

Builds a connected pylxd client from an IncusConfig. Remote connections need
certificate files on disk (requests only takes paths), so resolved credential
material is written to a private temporary directory that lives as long as
the returned IncusClient.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import pylxd
import requests
from pylxd.exceptions import ClientConnectionFailed

from .config import CREDENTIAL_FIELDS, IncusConfig
from .errors import ConfigNotFoundError, ConnectError, ConnectTimeoutError, CredentialReadError

logger = logging.getLogger(__name__)

PEM_MARKER = "-----BEGIN"


class IncusClient:
    """A connected pylxd client and the credential files backing it."""

    def __init__(self, api: pylxd.Client, credentials_dir: Optional[Path] = None):
        self.api = api
        self._credentials_dir = credentials_dir

    @property
    def instances(self):
        return self.api.instances

    def close(self) -> None:
        """Remove credential files written for this connection."""
        if self._credentials_dir is not None:
            shutil.rmtree(self._credentials_dir, ignore_errors=True)
            self._credentials_dir = None

    def __enter__(self) -> "IncusClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_credential(value: str, field: str) -> bytes:
    """Return PEM bytes for a credential given inline or as a file path.

    Raises:
        CredentialReadError: If value is a path that cannot be read
    """
    if PEM_MARKER in value:
        return value.encode()
    try:
        return Path(value).read_bytes()
    except OSError as e:
        raise CredentialReadError(field, e) from e


def resolve_credentials(config: IncusConfig) -> dict[str, bytes]:
    """Resolve each configured credential field, stopping at the first failure."""
    resolved = {}
    for attr, field in CREDENTIAL_FIELDS:
        value = getattr(config, attr)
        if value:
            resolved[attr] = read_credential(value, field)
    return resolved


def _write_credentials(credentials: dict[str, bytes]) -> Path:
    directory = Path(tempfile.mkdtemp(prefix="garm-incus-"))
    try:
        for attr, content in credentials.items():
            fd = os.open(directory / f"{attr}.pem", os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(content)
    except OSError as e:
        shutil.rmtree(directory, ignore_errors=True)
        raise ConnectError(f"writing credentials: {e}") from e
    return directory


def _connect(endpoint: str, target: str, **kwargs) -> pylxd.Client:
    """Open a pylxd client, translating transport failures to ConnectError."""
    try:
        return pylxd.Client(endpoint=endpoint, **kwargs)
    except ClientConnectionFailed as e:
        # pylxd re-raises requests errors without chaining them explicitly
        if isinstance(e.__context__, requests.exceptions.Timeout):
            raise ConnectTimeoutError(f"{target}: timed out") from e
        raise ConnectError(f"{target}: {str(e) or 'unexpected response from Incus API'}") from e
    except requests.exceptions.Timeout as e:
        raise ConnectTimeoutError(f"{target}: timed out") from e
    except requests.exceptions.RequestException as e:
        raise ConnectError(f"{target}: {e}") from e


def _connect_unix(config: IncusConfig, timeout: Optional[float]) -> IncusClient:
    path = config.unix_socket_path
    endpoint = f"http+unix://{quote(path, safe='')}"
    api = _connect(
        endpoint,
        f"dial unix {path}",
        timeout=timeout,
        project=config.project_name or None,
    )
    logger.info(f"Connected to Incus on unix socket {path}")
    return IncusClient(api)


def _connect_remote(
    config: IncusConfig,
    credentials: dict[str, bytes],
    timeout: Optional[float],
) -> IncusClient:
    if ("client_certificate" in credentials) != ("client_key" in credentials):
        raise ConnectError("client certificate and client key must be set together")

    credentials_dir = _write_credentials(credentials) if credentials else None

    def path_of(attr: str) -> Optional[str]:
        if credentials_dir is None or attr not in credentials:
            return None
        return str(credentials_dir / f"{attr}.pem")

    cert = None
    if path_of("client_certificate"):
        cert = (path_of("client_certificate"), path_of("client_key"))
    # A pinned server certificate wins over the CA; neither means the system store
    verify = path_of("tls_server_certificate") or path_of("tls_ca") or True

    try:
        api = _connect(
            config.url,
            config.url,
            cert=cert,
            verify=verify,
            timeout=timeout,
            project=config.project_name or None,
        )
    except Exception:
        if credentials_dir is not None:
            shutil.rmtree(credentials_dir, ignore_errors=True)
        raise

    logger.info(f"Connected to Incus at {config.url}")
    return IncusClient(api, credentials_dir)


def get_client_from_config(config: Optional[IncusConfig], timeout: Optional[float] = None) -> IncusClient:
    """Connect to Incus as described by config.

    A unix socket takes precedence over a remote URL. Credential fields are
    only read for remote connections.

    Args:
        config: Connection settings
        timeout: Seconds to wait on the API before giving up

    Returns:
        A connected IncusClient

    Raises:
        ConfigNotFoundError: If config is None
        CredentialReadError: If a certificate or key file cannot be read
        ConnectTimeoutError: If the API did not answer within timeout
        ConnectError: If the connection could not be established
    """
    if config is None:
        raise ConfigNotFoundError()

    if config.unix_socket_path:
        return _connect_unix(config, timeout)

    credentials = resolve_credentials(config)
    if not config.url:
        raise ConnectError("no unix_socket_path or url configured")

    return _connect_remote(config, credentials, timeout)
