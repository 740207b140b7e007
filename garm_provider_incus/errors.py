"""Exception hierarchy for garm-provider-incus."""


class IncusProviderError(Exception):
    """Base exception for garm-provider-incus errors."""


class ConfigNotFoundError(IncusProviderError):
    """No Incus configuration was supplied."""

    def __init__(self):
        super().__init__("no Incus configuration found")


class ConfigError(IncusProviderError):
    """Configuration is present but invalid."""


class CredentialReadError(IncusProviderError):
    """A certificate or key file could not be read."""

    def __init__(self, field: str, cause: Exception):
        self.field = field
        super().__init__(f"reading {field}: {cause}")


class ConnectError(IncusProviderError):
    """Connecting to the Incus API failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"connecting to Incus: {reason}")


class ConnectTimeoutError(ConnectError):
    """Connecting to the Incus API did not finish in time."""


class InstanceNotFoundError(IncusProviderError):
    """Requested instance does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"instance {name} not found")


class ProviderError(IncusProviderError):
    """An Incus API call failed."""
