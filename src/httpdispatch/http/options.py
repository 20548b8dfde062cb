"""Transport options for a single request."""

from dataclasses import dataclass, field
from http.cookiejar import CookieJar
from typing import List, Optional, Union

import httpx

from httpdispatch.http.certificates import Certificate
from httpdispatch.http.headers import HeaderMap
from httpdispatch.http.hooks import AfterResponseHook, BeforeRequestHook, HookAuth
from httpdispatch.http.proxy import ProxyAgent


@dataclass
class TransportOptions:
    """Fully resolved configuration handed to the transport.

    Built fresh by ``RequestBuilder.prepare`` for every request and discarded
    afterwards. ``headers`` is a clone; the logical request's own headers
    are never touched.
    """

    method: str
    url: str
    headers: HeaderMap
    body: Optional[Union[str, bytes]] = None
    follow_redirect: bool = True
    timeout: Optional[float] = None  # seconds
    cookie_jar: Optional[CookieJar] = None
    verify: bool = False
    certificate: Optional[Certificate] = None
    agent: Optional[ProxyAgent] = None
    username: Optional[str] = None
    password: Optional[str] = None
    before_request: List[BeforeRequestHook] = field(default_factory=list)
    after_response: List[AfterResponseHook] = field(default_factory=list)

    # Fixed policy
    throw_http_errors: bool = False
    retry: int = 0
    decompress: bool = True

    @property
    def content(self) -> Optional[bytes]:
        """Request body encoded for the wire."""
        if isinstance(self.body, str):
            return self.body.encode('utf-8')
        return self.body

    def build_auth(self) -> Optional[httpx.Auth]:
        """Fold credentials and hooks into an httpx auth flow, if any are set."""
        if self.username is None and not self.before_request and not self.after_response:
            return None
        return HookAuth(
            before_request=self.before_request,
            after_response=self.after_response,
            username=self.username,
            password=self.password,
        )
