"""HTTP client that sends logical requests (async-only).

Each request gets its own httpx.AsyncClient, because TLS verification,
client certificates and proxy routing are all decided per request. The
response is always opened in streaming mode and handed to a
ResponseConsumer.

Retries are disabled: a failed request raises and the caller decides what
to do with it.

Example:
    >>> client = HttpClient()
    >>> request = HttpRequest('GET', 'https://example.com/', {'Accept': 'text/html'})
    >>> response = await client.send(request, Settings(timeout_ms=5000))
    >>> response.status_code, response.body[:15]
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Set

import httpx

from httpdispatch.config import Settings
from httpdispatch.errors import NetworkError
from httpdispatch.http.builder import RequestBuilder
from httpdispatch.http.certificates import WorkspaceContext, create_ssl_context
from httpdispatch.http.consumer import ResponseConsumer
from httpdispatch.http.cookies import CookieStore, FileCookieStore
from httpdispatch.http.options import TransportOptions
from httpdispatch.http.timing import TraceCollector
from httpdispatch.models.request import HttpRequest
from httpdispatch.models.response import HttpResponse

logger = logging.getLogger(__name__)


class PendingRequest:
    """Cancelable handle for a request in flight.

    Awaiting the handle yields the HttpResponse. Cancelling before the
    response resolves aborts the request; cancelling afterwards does nothing.
    """

    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Abort the request if it has not resolved yet.

        Returns:
            True if the request was cancelled
        """
        if self._task.done():
            return False
        logger.debug("Cancelling pending request")
        return self._task.cancel()

    def __await__(self):
        return self._task.__await__()


class HttpClient:
    """Sends logical requests and returns decoded responses.

    Args:
        cookie_store: Cookie jar shared by all requests; defaults to the file
            at ``Settings.get_cookie_file()``
        workspace: Context for resolving relative certificate paths
        transport: Transport used instead of the network (e.g. for tests);
            proxy routing is skipped when set
    """

    def __init__(
        self,
        cookie_store: Optional[CookieStore] = None,
        workspace: Optional[WorkspaceContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if cookie_store is None:
            cookie_store = FileCookieStore(str(Settings.get_cookie_file()))
        self.cookie_store = cookie_store
        self.transport = transport
        self.builder = RequestBuilder(cookie_store, workspace)
        self._closers: Set[asyncio.Task] = set()

    def create_client(self, options: TransportOptions) -> httpx.AsyncClient:
        """Create the httpx client for one set of transport options."""
        verify = create_ssl_context(options.verify, options.certificate)

        mounts = None
        transport = self.transport
        if transport is None:
            transport = httpx.AsyncHTTPTransport(verify=verify, retries=options.retry)
            if options.agent is not None:
                mounts = {options.agent.mount_pattern: options.agent.build_transport(verify)}

        return httpx.AsyncClient(
            verify=verify,
            cookies=options.cookie_jar,
            timeout=httpx.Timeout(options.timeout),
            follow_redirects=options.follow_redirect,
            transport=transport,
            mounts=mounts,
            trust_env=False,
        )

    async def send(
        self,
        request: HttpRequest,
        settings: Optional[Settings] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> HttpResponse:
        """Send ``request`` and return its decoded response.

        Non-2xx responses are returned normally. For ``text/event-stream``
        responses this returns once headers arrive; the body keeps growing
        until the stream ends or ``response.aclose()`` is called.

        Args:
            request: Logical request; not modified
            settings: Dispatch settings; defaults to ``Settings()``
            on_progress: Called with the size of each body chunk received

        Returns:
            HttpResponse

        Raises:
            ConfigurationError: If the URL cannot be parsed
            AuthResolutionError: If authorization cannot be resolved
            NetworkError: If the connection fails
        """
        settings = settings or Settings()
        options = await self.builder.prepare(request, settings)

        timer = TraceCollector()
        client = self.create_client(options)
        try:
            raw_request = client.build_request(
                options.method,
                options.url,
                headers=list(options.headers.items()),
                content=options.content,
                extensions={'trace': timer},
            )
            try:
                raw = await client.send(raw_request, stream=True, auth=options.build_auth())
            except httpx.TransportError as e:
                raise NetworkError(f"{options.method} {options.url} failed: {e}") from e

            if options.cookie_jar is not None:
                self.cookie_store.save()

            response = await ResponseConsumer(request, options, settings, timer, on_progress).consume(raw)
        except BaseException:
            await client.aclose()
            raise

        if response.finished:
            await client.aclose()
        else:
            closer = asyncio.ensure_future(self._close_when_finished(response, client))
            self._closers.add(closer)
            closer.add_done_callback(self._closers.discard)
        return response

    def dispatch(self, request: HttpRequest, settings: Optional[Settings] = None) -> PendingRequest:
        """Start sending ``request`` and return a cancelable handle.

        The handle is also recorded on the request as its underlying request.
        """
        pending = PendingRequest(asyncio.ensure_future(self.send(request, settings)))
        request.set_underlying_request(pending)
        return pending

    async def clear_cookies(self) -> None:
        """Forget all remembered cookies, deleting the cookie file."""
        if isinstance(self.cookie_store, FileCookieStore):
            path = self.cookie_store.path
            Path(path).unlink(missing_ok=True)
            self.cookie_store = FileCookieStore(str(path))
            self.builder.cookie_store = self.cookie_store
        else:
            self.cookie_store.clear()
        logger.info("Cleared remembered cookies")

    @staticmethod
    async def _close_when_finished(response: HttpResponse, client: httpx.AsyncClient) -> None:
        await response.wait_finished()
        await client.aclose()
