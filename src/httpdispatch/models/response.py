"""Response model built incrementally by the response consumer."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from httpdispatch.models.request import HttpRequest
from httpdispatch.utils.text import parse_mime

logger = logging.getLogger(__name__)


@dataclass
class TimingPhases:
    """Request timing breakdown in milliseconds.

    Phases that did not happen (no DNS lookup on a reused connection, no TLS
    on plain HTTP) are None.
    """

    wait: Optional[float] = None
    dns: Optional[float] = None
    tcp: Optional[float] = None
    tls: Optional[float] = None
    request: Optional[float] = None
    first_byte: Optional[float] = None
    download: Optional[float] = None
    total: Optional[float] = None


@dataclass
class HttpResponse:
    """Decoded response.

    ``body``, ``body_buffer`` and ``body_size_in_bytes`` grow as chunks
    arrive. For event streams the object is handed to the caller before the
    stream ends and keeps growing afterwards.
    """

    status_code: int
    status_message: str
    http_version: str
    headers: Dict[str, str]
    body: str = ''
    body_size_in_bytes: int = 0
    headers_size_in_bytes: int = 0
    body_buffer: bytearray = field(default_factory=bytearray)
    timing_phases: TimingPhases = field(default_factory=TimingPhases)
    request: Optional[HttpRequest] = None
    raw_response: Any = field(default=None, repr=False)
    _reader: Optional[asyncio.Task] = field(default=None, init=False, repr=False, compare=False)

    @property
    def content_type(self) -> Optional[str]:
        """The ``Content-Type`` header, looked up case-insensitively."""
        for name, value in self.headers.items():
            if name.lower() == 'content-type':
                return value
        return None

    @property
    def essence(self) -> Optional[str]:
        """Content type without parameters, or None without a content type."""
        if self.content_type:
            return parse_mime(self.content_type).essence
        return None

    @property
    def finished(self) -> bool:
        """True once the body has been fully consumed or consumption stopped."""
        return self._reader is None or self._reader.done()

    def attach_reader(self, task: asyncio.Task) -> None:
        """Bind the task that is still feeding this response's body."""
        self._reader = task

    async def wait_finished(self) -> None:
        """Wait until body consumption stops, without raising."""
        if self._reader is not None:
            await asyncio.wait([self._reader])

    async def aclose(self) -> None:
        """Stop consuming a live stream and release the connection."""
        if self._reader is not None and not self._reader.done():
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
        if self.raw_response is not None:
            await self.raw_response.aclose()
        logger.debug(f"Closed response stream for {self.request.url if self.request else '<unknown>'}")
