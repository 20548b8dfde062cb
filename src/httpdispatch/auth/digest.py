"""Digest access authentication (RFC 7616) as an after-response hook."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class DigestChallengeHook:
    """Answers a ``401`` digest challenge by reissuing the request once.

    The digest response itself is computed by ``httpx.DigestAuth``; this hook
    only decides when to run it.
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def __call__(self, request: httpx.Request, response: httpx.Response) -> Optional[httpx.Request]:
        if response.status_code != 401:
            return None

        challenges = response.headers.get_list('www-authenticate')
        if not any(c.lower().startswith('digest ') for c in challenges):
            return None

        flow = httpx.DigestAuth(self.username, self.password).auth_flow(request)
        next(flow)
        try:
            retry = flow.send(response)
        except StopIteration:
            return None

        logger.debug(f"Answering digest challenge for {request.url}")
        return retry
