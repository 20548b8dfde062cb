"""HTTP dispatch infrastructure (async-only).

Uses httpx as the transport. The client and builder live in
``httpdispatch.http.client`` and ``httpdispatch.http.builder``.
"""

from httpdispatch.http.certificates import Certificate, CertificateResolver, WorkspaceContext
from httpdispatch.http.cookies import CookieStore, FileCookieStore, MemoryCookieStore, load_cookies_from_file
from httpdispatch.http.headers import HeaderMap, load_headers_from_file, normalize_header_names
from httpdispatch.http.proxy import ProxyAgent, ProxyResolver, ignore_proxy

__all__ = [
    "Certificate",
    "CertificateResolver",
    "WorkspaceContext",
    "CookieStore",
    "FileCookieStore",
    "MemoryCookieStore",
    "load_cookies_from_file",
    "HeaderMap",
    "load_headers_from_file",
    "normalize_header_names",
    "ProxyAgent",
    "ProxyResolver",
    "ignore_proxy",
]
