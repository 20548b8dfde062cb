"""Request lifecycle hooks.

Hooks run in registration order. Before-request hooks may only change the
outgoing request (typically its headers). After-response hooks inspect the
response and may return a new request to send once in its place, which is
how challenge/response schemes such as digest authentication work.
Before-request hooks run once, on the original request only; a request
reissued by an after-response hook is sent as returned, so that hook must
carry over any header it needs.

``HookAuth`` plugs both lists into httpx's auth flow, the point in httpx
where a request can be rewritten just before sending and reissued after a
response.
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

import httpx

logger = logging.getLogger(__name__)

BeforeRequestHook = Callable[[httpx.Request], Union[None, Awaitable[None]]]
AfterResponseHook = Callable[
    [httpx.Request, httpx.Response],
    Union[Optional[httpx.Request], Awaitable[Optional[httpx.Request]]],
]


async def _resolve(result):
    if inspect.isawaitable(result):
        return await result
    return result


class HookAuth(httpx.Auth):
    """httpx auth flow that applies basic credentials and runs hooks.

    Args:
        before_request: Hooks run on the outgoing request, in order
        after_response: Hooks run on the response, in order; each may
            return a request to send instead. Before-request hooks
            are not run again on that request
        username: Basic auth username, applied before any hook
        password: Basic auth password
    """

    def __init__(
        self,
        before_request: Optional[List[BeforeRequestHook]] = None,
        after_response: Optional[List[AfterResponseHook]] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.before_request = list(before_request or [])
        self.after_response = list(after_response or [])
        self.username = username
        self.password = password

    def sync_auth_flow(self, request):
        raise RuntimeError("HookAuth can only be used with httpx.AsyncClient")

    async def async_auth_flow(self, request):
        if self.username is not None:
            basic = httpx.BasicAuth(self.username, self.password or '')
            request = next(basic.auth_flow(request))

        for hook in self.before_request:
            await _resolve(hook(request))

        response = yield request

        for hook in self.after_response:
            retry = await _resolve(hook(request, response))
            if retry is not None:
                logger.debug(f"{type(hook).__name__} reissued {retry.method} {retry.url}")
                request = retry
                response = yield retry
