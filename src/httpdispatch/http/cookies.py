"""Persistent cookie storage.

Cookies are kept in a Netscape cookie file (the format used by browsers,
curl and ``http.cookiejar.MozillaCookieJar``) so they survive between runs.

The jar may be shared by requests in flight at the same time. Only the
locking ``http.cookiejar`` does internally protects it; the file is simply
rewritten after each response.
"""

import logging
from abc import ABC, abstractmethod
from http.cookiejar import Cookie, CookieJar, MozillaCookieJar
from pathlib import Path
from typing import List, Optional

import httpx

from httpdispatch.utils.file import ensure_dir

logger = logging.getLogger(__name__)

_HTTP_ONLY_PREFIX = '#HttpOnly_'


def load_cookies_from_file(cookie_file: str) -> List[Cookie]:
    """Load cookies from Netscape cookie file format.

    The Netscape cookie format is:
    # domain flag path secure expiration name value

    Malformed lines are skipped rather than failing the whole file.

    Args:
        cookie_file: Path to cookie file

    Returns:
        List of Cookie objects

    Example file format:
        # Netscape HTTP Cookie File
        .example.com    TRUE    /    FALSE    1735689600    sessionid    abc123
    """
    cookies = []
    cookie_path = Path(cookie_file)

    if not cookie_path.exists():
        return cookies

    with open(cookie_path, 'r') as f:
        for line in f:
            line = line.strip()

            # HttpOnly cookies are written as comments by curl and browsers
            if line.startswith(_HTTP_ONLY_PREFIX):
                line = line[len(_HTTP_ONLY_PREFIX):]

            # Skip comments and empty lines
            if not line or line.startswith('#'):
                continue

            parts = line.split('\t')
            if len(parts) < 7:
                logger.debug(f"Skipping malformed cookie line in {cookie_file}")
                continue

            domain, flag, path, secure, expiration, name, value = parts[:7]

            domain_specified = flag.upper() == 'TRUE'
            secure_flag = secure.upper() == 'TRUE'

            try:
                expires = int(expiration)
            except ValueError:
                expires = None

            cookie = Cookie(
                version=0,
                name=name,
                value=value,
                port=None,
                port_specified=False,
                domain=domain,
                domain_specified=domain_specified,
                domain_initial_dot=domain.startswith('.'),
                path=path,
                path_specified=True,
                secure=secure_flag,
                expires=expires,
                discard=expires is None,
                comment=None,
                comment_url=None,
                rest={},
                rfc2109=False,
            )
            cookies.append(cookie)

    return cookies


class CookieStore(ABC):
    """Cookie jar keyed by URL.

    ``jar`` is handed to the transport, which reads and updates it while
    requests are in flight; ``save`` persists whatever it holds.
    """

    @property
    @abstractmethod
    def jar(self) -> CookieJar:
        """The live cookie jar."""

    @abstractmethod
    def save(self) -> None:
        """Persist the jar."""

    def get(self, url: str) -> Optional[str]:
        """Return the ``Cookie`` header value that would be sent to ``url``."""
        request = httpx.Request('GET', url)
        httpx.Cookies(self.jar).set_cookie_header(request)
        return request.headers.get('cookie')

    def set(self, url: str, set_cookie: str) -> None:
        """Store a cookie as if ``url`` had answered with ``Set-Cookie``."""
        response = httpx.Response(
            200,
            headers=[('set-cookie', set_cookie)],
            request=httpx.Request('GET', url),
        )
        httpx.Cookies(self.jar).extract_cookies(response)
        self.save()

    def clear(self) -> None:
        """Remove every cookie."""
        self.jar.clear()
        self.save()


class MemoryCookieStore(CookieStore):
    """Cookie store that lives only as long as the process."""

    def __init__(self):
        self._jar = CookieJar()

    @property
    def jar(self) -> CookieJar:
        return self._jar

    def save(self) -> None:
        pass


class FileCookieStore(CookieStore):
    """Cookie store backed by a Netscape cookie file."""

    def __init__(self, cookie_file: str):
        """Open (or lazily create) the cookie file.

        Args:
            cookie_file: Path of the Netscape cookie file
        """
        self.path = Path(cookie_file)
        self._jar = MozillaCookieJar(str(self.path))
        for cookie in load_cookies_from_file(str(self.path)):
            self._jar.set_cookie(cookie)
        logger.debug(f"Loaded {len(self._jar)} cookies from {self.path}")

    @property
    def jar(self) -> CookieJar:
        return self._jar

    def save(self) -> None:
        ensure_dir(self.path.parent)
        self._jar.save(ignore_discard=True, ignore_expires=True)
