"""Tests for Settings loading and validation."""

import json

import pytest

from httpdispatch.config import HostCertificate, Settings
from httpdispatch.errors import ConfigurationError


class TestSettings:
    """Test Settings defaults and normalization."""

    def test_defaults(self):
        settings = Settings()
        assert settings.timeout_ms == 0
        assert settings.timeout_seconds is None
        assert settings.follow_redirect is True
        assert settings.proxy is None
        assert settings.exclude_hosts_for_proxy == []
        assert settings.proxy_strict_ssl is False
        assert settings.remember_cookies_for_subsequent_requests is True
        assert settings.decode_escaped_unicode_characters is False
        assert settings.host_certificates == {}

    @pytest.mark.parametrize("timeout_ms, expected", [(0, None), (-5, None), (1500, 1.5)])
    def test_timeout_seconds(self, timeout_ms, expected):
        assert Settings(timeout_ms=timeout_ms).timeout_seconds == expected

    def test_empty_proxy_is_none(self):
        assert Settings(proxy="").proxy is None

    def test_certificate_dicts_are_coerced(self):
        settings = Settings(host_certificates={"example.com": {"cert": "c.pem", "key": "k.pem"}})
        assert settings.host_certificates["example.com"] == HostCertificate(cert="c.pem", key="k.pem")

    def test_invalid_certificate_config(self):
        with pytest.raises(ConfigurationError):
            Settings(host_certificates={"example.com": "c.pem"})

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError):
            Settings(timeout_ms="soon")


class TestSettingsLoading:
    """Test Settings.from_dict and Settings.from_file."""

    def test_from_dict_camel_case(self):
        settings = Settings.from_dict({
            "timeoutInMilliseconds": 2000,
            "followRedirect": False,
            "proxy": "http://proxy.local:3128",
            "excludeHostsForProxy": ["localhost"],
            "proxyStrictSSL": True,
            "rememberCookiesForSubsequentRequests": False,
            "decodeEscapedUnicodeCharacters": True,
            "certificates": {"example.com:8443": {"pfx": "client.pfx", "passphrase": "pw"}},
        })
        assert settings.timeout_ms == 2000
        assert settings.follow_redirect is False
        assert settings.proxy == "http://proxy.local:3128"
        assert settings.exclude_hosts_for_proxy == ["localhost"]
        assert settings.proxy_strict_ssl is True
        assert settings.remember_cookies_for_subsequent_requests is False
        assert settings.decode_escaped_unicode_characters is True
        assert settings.host_certificates["example.com:8443"].pfx == "client.pfx"

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown setting"):
            Settings.from_dict({"retries": 3})

    def test_from_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"timeoutMs": 100, "hostCertificates": {}}))
        assert Settings.from_file(str(path)).timeout_ms == 100

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            Settings.from_file(str(path))

    def test_from_file_not_an_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[]")
        with pytest.raises(ConfigurationError):
            Settings.from_file(str(path))

    def test_cookie_file_from_environment(self, isolated_cookie_file):
        assert Settings.get_cookie_file() == isolated_cookie_file
