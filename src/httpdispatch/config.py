"""Configuration management for httpdispatch."""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from httpdispatch.errors import ConfigurationError


@dataclass
class HostCertificate:
    """Client certificate configuration for one ``host[:port]``.

    Paths may be absolute or relative; relative paths are resolved against
    the workspace root or the directory of the current request file.
    """

    cert: Optional[str] = None
    key: Optional[str] = None
    pfx: Optional[str] = None
    passphrase: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostCertificate":
        """Create HostCertificate from dictionary."""
        return cls(
            cert=data.get('cert'),
            key=data.get('key'),
            pfx=data.get('pfx'),
            passphrase=data.get('passphrase'),
        )


# camelCase keys accepted by Settings.from_dict, mapped to field names
_SETTING_KEYS = {
    'timeoutInMilliseconds': 'timeout_ms',
    'timeoutMs': 'timeout_ms',
    'followRedirect': 'follow_redirect',
    'proxy': 'proxy',
    'excludeHostsForProxy': 'exclude_hosts_for_proxy',
    'proxyStrictSSL': 'proxy_strict_ssl',
    'rememberCookiesForSubsequentRequests': 'remember_cookies_for_subsequent_requests',
    'decodeEscapedUnicodeCharacters': 'decode_escaped_unicode_characters',
    'certificates': 'host_certificates',
    'hostCertificates': 'host_certificates',
}


@dataclass
class Settings:
    """Per-request dispatch settings.

    This class carries every option the dispatch pipeline reads: timeout,
    redirect policy, proxy and its bypass list, cookie persistence, response
    decoding and per-host client certificates.
    """

    # HTTP settings
    timeout_ms: int = 0  # <= 0 disables the timeout
    follow_redirect: bool = True

    # Proxy settings
    proxy: Optional[str] = None
    exclude_hosts_for_proxy: List[str] = field(default_factory=list)
    proxy_strict_ssl: bool = False

    # Cookies
    remember_cookies_for_subsequent_requests: bool = True

    # Response decoding
    decode_escaped_unicode_characters: bool = False

    # Client certificates keyed by host[:port]
    host_certificates: Dict[str, HostCertificate] = field(default_factory=dict)

    def __post_init__(self):
        """Validate and normalize configuration."""
        try:
            self.timeout_ms = int(self.timeout_ms or 0)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid timeout: {self.timeout_ms!r}")

        if not self.proxy:
            self.proxy = None

        if isinstance(self.exclude_hosts_for_proxy, str):
            self.exclude_hosts_for_proxy = [self.exclude_hosts_for_proxy]
        self.exclude_hosts_for_proxy = list(self.exclude_hosts_for_proxy or [])

        certificates = {}
        for host, value in (self.host_certificates or {}).items():
            if isinstance(value, HostCertificate):
                certificates[host] = value
            elif isinstance(value, dict):
                certificates[host] = HostCertificate.from_dict(value)
            else:
                raise ConfigurationError(f"Invalid certificate configuration for host {host!r}")
        self.host_certificates = certificates

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Timeout in seconds, or None when no timeout is configured."""
        if self.timeout_ms > 0:
            return self.timeout_ms / 1000.0
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create Settings from a dictionary of camelCase or field-name keys.

        Args:
            data: Settings dictionary, e.g. parsed from a JSON settings file

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a key is not a known setting
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _SETTING_KEYS.get(key, key)
            if name not in names:
                raise ConfigurationError(f"Unknown setting: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_file(cls, settings_file: str) -> "Settings":
        """Load Settings from a JSON file.

        Args:
            settings_file: Path to JSON settings file

        Returns:
            Settings instance
        """
        path = Path(settings_file)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read settings file {settings_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {settings_file} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def get_home_dir(cls) -> Path:
        """Get the httpdispatch home directory (~/.httpdispatch)."""
        home = Path.home() / ".httpdispatch"
        home.mkdir(parents=True, exist_ok=True)
        return home

    @classmethod
    def get_cookie_file(cls) -> Path:
        """Get the persistent cookie file path.

        The ``HTTPDISPATCH_COOKIE_FILE`` environment variable takes
        precedence over ``~/.httpdispatch/cookies.txt``.
        """
        env_path = os.environ.get('HTTPDISPATCH_COOKIE_FILE')
        if env_path:
            return Path(env_path)
        return cls.get_home_dir() / "cookies.txt"
