"""Proxy selection.

A configured proxy is used for every request unless the target matches an
entry in the bypass list. Entries are ``host`` or ``host:port``.
"""

import logging
import ssl
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple
from urllib.parse import urlsplit

import httpx

from httpdispatch.config import Settings

if TYPE_CHECKING:
    from httpdispatch.http.options import TransportOptions

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {'http': 80, 'https': 443}


def _split_host_port(netloc: str) -> Tuple[str, Optional[str]]:
    """Split ``host[:port]`` keeping the port exactly as written."""
    netloc = netloc.rpartition('@')[2]
    if netloc.startswith('['):
        host, _, rest = netloc[1:].partition(']')
        port = rest[1:] if rest.startswith(':') else None
        return host.lower(), port or None
    host, sep, port = netloc.partition(':')
    return host.lower(), (port if sep and port else None)


def ignore_proxy(url: str, exclude_hosts: Optional[Iterable[str]]) -> bool:
    """Check whether ``url`` bypasses the proxy.

    Without an explicit port in the URL, only bare ``host`` entries equal to
    the hostname match. With an explicit port, an entry matches when its
    host equals the hostname and it either has no port or the same port.

    Args:
        url: Target URL
        exclude_hosts: Bypass entries, ``host`` or ``host:port``

    Returns:
        True if the proxy must be skipped for this URL
    """
    if not exclude_hosts:
        return False

    hostname, port = _split_host_port(urlsplit(url).netloc)

    for entry in {host.lower() for host in exclude_hosts}:
        parts = entry.split(':')
        if port is None:
            if len(parts) == 1 and parts[0] == hostname:
                return True
        else:
            entry_host = parts[0]
            entry_port = parts[1] if len(parts) > 1 else None
            if entry_host == hostname and (not entry_port or entry_port == port):
                return True

    return False


@dataclass
class ProxyAgent:
    """Forwarding agent bound to one proxy.

    Attributes:
        url: Proxy URL (scheme, optional credentials, host and port)
        strict_ssl: Whether to verify the proxy's own TLS certificate
        tunnel: True for https targets, which are tunneled with CONNECT;
            plain http targets are forwarded in absolute form
    """

    url: str
    strict_ssl: bool = False
    tunnel: bool = False

    @property
    def mount_pattern(self) -> str:
        """httpx mount key for the target scheme this agent serves."""
        return 'https://' if self.tunnel else 'http://'

    def build_transport(self, verify: ssl.SSLContext) -> httpx.AsyncHTTPTransport:
        """Create the httpx transport routing through this proxy.

        Args:
            verify: SSL context for the target server connection

        Returns:
            httpx.AsyncHTTPTransport configured with the proxy
        """
        proxy_context = ssl.create_default_context()
        if not self.strict_ssl:
            proxy_context.check_hostname = False
            proxy_context.verify_mode = ssl.CERT_NONE

        return httpx.AsyncHTTPTransport(
            proxy=httpx.Proxy(self.url, ssl_context=proxy_context),
            verify=verify,
            retries=0,
        )


class ProxyResolver:
    """Attaches a proxy agent to transport options when one applies."""

    def resolve(self, options: "TransportOptions", url: str, settings: Settings) -> None:
        """Set ``options.agent`` unless no proxy applies to ``url``.

        Args:
            options: Transport options to augment
            url: Target URL
            settings: Settings holding proxy configuration
        """
        if not settings.proxy:
            return

        if ignore_proxy(url, settings.exclude_hosts_for_proxy):
            logger.debug(f"Bypassing proxy for {url}")
            return

        endpoint = urlsplit(settings.proxy)
        scheme = endpoint.scheme.lower()
        if scheme not in _DEFAULT_PORTS:
            logger.debug(f"Ignoring proxy with unsupported scheme: {settings.proxy}")
            return

        host, port = _split_host_port(endpoint.netloc)
        port = port or str(_DEFAULT_PORTS[scheme])
        userinfo = endpoint.netloc.rpartition('@')[0]
        if ':' in host:
            host = f'[{host}]'
        proxy_url = f"{scheme}://{userinfo + '@' if userinfo else ''}{host}:{port}"

        options.agent = ProxyAgent(
            url=proxy_url,
            strict_ssl=settings.proxy_strict_ssl,
            tunnel=not url.lower().startswith('http:'),
        )
        logger.debug(f"Routing {url} through proxy {scheme}://{host}:{port}")
