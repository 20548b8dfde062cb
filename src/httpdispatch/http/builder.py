"""Transport option building.

Turns a logical request and the user's settings into the options one
transport call needs. The logical request is read, never written: the
headers are cloned before any rewriting so the caller can send the same
request again.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

import httpx

from httpdispatch.auth.dispatcher import AuthDispatcher
from httpdispatch.config import Settings
from httpdispatch.errors import ConfigurationError
from httpdispatch.http.certificates import CertificateResolver, WorkspaceContext
from httpdispatch.http.cookies import CookieStore
from httpdispatch.http.options import TransportOptions
from httpdispatch.http.proxy import ProxyResolver
from httpdispatch.models.request import HttpRequest, materialize_body
from httpdispatch.utils.text import encode_url

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Encode ``url`` and check that the transport can parse it.

    Args:
        url: URL as written in the request

    Returns:
        The encoded URL

    Raises:
        ConfigurationError: If the URL has no http(s) scheme or host, or
            httpx rejects it
    """
    encoded = encode_url(url)
    parts = urlsplit(encoded)
    if parts.scheme.lower() not in ('http', 'https') or not parts.netloc:
        raise ConfigurationError(f"Invalid request URL: {url}")

    try:
        httpx.URL(encoded)
    except (httpx.InvalidURL, ValueError) as e:
        raise ConfigurationError(f"Invalid request URL: {url}") from e

    return encoded


class RequestBuilder:
    """Builds TransportOptions for one request at a time.

    Args:
        cookie_store: Persistent cookie jar, attached when cookies are remembered
        workspace: Context for resolving relative certificate paths
    """

    def __init__(
        self,
        cookie_store: Optional[CookieStore] = None,
        workspace: Optional[WorkspaceContext] = None,
    ):
        self.cookie_store = cookie_store
        self.auth = AuthDispatcher()
        self.certificates = CertificateResolver(workspace)
        self.proxies = ProxyResolver()

    async def prepare(self, request: HttpRequest, settings: Settings) -> TransportOptions:
        """Build transport options for ``request``.

        Args:
            request: Logical request; left untouched
            settings: Dispatch settings

        Returns:
            Fresh TransportOptions

        Raises:
            ConfigurationError: If the request URL cannot be parsed
            AuthResolutionError: If an auth hook cannot be resolved
        """
        url = validate_url(request.url)

        # The body is read into memory; streaming upload is not supported
        body = await materialize_body(request.body)
        if not body:
            body = None

        options = TransportOptions(
            method=request.method,
            url=url,
            headers=request.headers.copy(),
            body=body,
            follow_redirect=settings.follow_redirect,
            timeout=settings.timeout_seconds,
            verify=False,
        )

        if settings.remember_cookies_for_subsequent_requests and self.cookie_store is not None:
            options.cookie_jar = self.cookie_store.jar

        await self.auth.apply(options.headers, options)

        options.certificate = self.certificates.resolve(request.url, settings)
        self.proxies.resolve(options, request.url, settings)

        logger.debug(
            f"Prepared {options.method} {options.url} "
            f"(proxy={options.agent is not None}, certificate={options.certificate is not None})"
        )
        return options
