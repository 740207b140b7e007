"""Tests for IncusConfig."""

import pytest

from garm_provider_incus.config import IncusConfig
from garm_provider_incus.errors import ConfigError


class TestConfigFromDict:
    """Tests for IncusConfig.from_dict()."""

    def test_empty_mapping_uses_defaults(self):
        assert IncusConfig.from_dict({}) == IncusConfig()

    def test_loads_all_fields(self):
        config = IncusConfig.from_dict({
            "unix_socket_path": "/var/lib/incus/unix.socket",
            "url": "https://incus.example:8443",
            "client_certificate": "/etc/garm/client.crt",
            "client_key": "/etc/garm/client.key",
            "tls_server_certificate": "/etc/garm/server.crt",
            "tls_ca": "/etc/garm/ca.crt",
            "project_name": "garm",
        })
        assert config.unix_socket_path == "/var/lib/incus/unix.socket"
        assert config.url == "https://incus.example:8443"
        assert config.client_certificate == "/etc/garm/client.crt"
        assert config.client_key == "/etc/garm/client.key"
        assert config.tls_server_certificate == "/etc/garm/server.crt"
        assert config.tls_ca == "/etc/garm/ca.crt"
        assert config.project_name == "garm"

    def test_ignores_unknown_keys(self):
        config = IncusConfig.from_dict({"url": "https://x", "secure_boot": True})
        assert config.url == "https://x"

    def test_rejects_non_string_values(self):
        with pytest.raises(ConfigError, match="url must be a string"):
            IncusConfig.from_dict({"url": 8443})


class TestConfigValidate:
    """Tests for IncusConfig.validate()."""

    def test_unix_socket_is_enough(self):
        IncusConfig(unix_socket_path="/var/lib/incus/unix.socket").validate()

    def test_requires_a_transport(self):
        with pytest.raises(ConfigError, match="unix_socket_path or url"):
            IncusConfig().validate()

    @pytest.mark.parametrize("url", ["http://incus:8443", "incus:8443", "https://"])
    def test_requires_https_url(self, url):
        config = IncusConfig(url=url, client_certificate="c", client_key="k")
        with pytest.raises(ConfigError, match="https"):
            config.validate()

    def test_remote_requires_client_credentials(self):
        with pytest.raises(ConfigError, match="client_certificate and client_key"):
            IncusConfig(url="https://incus:8443", client_certificate="c").validate()

    def test_valid_remote(self):
        IncusConfig(url="https://incus:8443", client_certificate="c", client_key="k").validate()
