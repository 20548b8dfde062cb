"""Streaming response consumption.

A ResponseConsumer follows one live response through three events:
metadata (status and headers), data (each body chunk, in arrival order) and
end. It builds the HttpResponse as the events arrive and resolves a single
completion future with it: at end of stream normally, or as soon as the
headers are in for ``text/event-stream`` responses, whose bodies keep
growing after the caller already holds them.
"""

import asyncio
import codecs
import logging
from typing import Callable, Optional

import httpx

from httpdispatch.config import Settings
from httpdispatch.errors import NetworkError
from httpdispatch.http.headers import normalize_header_names
from httpdispatch.http.options import TransportOptions
from httpdispatch.http.timing import TraceCollector
from httpdispatch.models.request import HttpRequest
from httpdispatch.models.response import HttpResponse, TimingPhases
from httpdispatch.utils.text import decode_escaped_unicode, resolve_charset

logger = logging.getLogger(__name__)

EVENT_STREAM = 'text/event-stream'


def estimate_headers_size(raw_headers) -> int:
    """Approximate header size in bytes.

    Sum of raw name and value lengths plus one byte per header line. This is
    not the exact wire size (no colons, spaces or CRLFs are counted).

    Args:
        raw_headers: Sequence of (name, value) byte pairs

    Returns:
        Approximate size in bytes
    """
    flat = [part for pair in raw_headers for part in pair]
    return sum(len(part) for part in flat) + len(flat) // 2


class ResponseConsumer:
    """Builds an HttpResponse from one live response.

    Args:
        request: The logical request that was sent
        options: The transport options it was sent with
        settings: Dispatch settings (for unicode unescaping)
        timer: Trace collector attached to the request, if any
        on_progress: Called with the size of each body chunk as it arrives
    """

    def __init__(
        self,
        request: HttpRequest,
        options: TransportOptions,
        settings: Settings,
        timer: Optional[TraceCollector] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ):
        self.request = request
        self.options = options
        self.settings = settings
        self.timer = timer
        self.on_progress = on_progress
        self.completion: asyncio.Future = asyncio.get_running_loop().create_future()
        self.response: Optional[HttpResponse] = None
        self.charset = 'utf-8'
        self._decoder = None

    def on_response(self, raw: httpx.Response) -> HttpResponse:
        """Handle status and headers; may resolve completion early."""
        if self.timer is not None:
            self.timer.mark_response()

        raw_names = [name.decode('latin-1') for name, _ in raw.headers.raw]
        headers = normalize_header_names(dict(raw.headers.items()), raw_names)

        content_type = raw.headers.get('content-type')
        self.charset = resolve_charset(content_type)
        self._decoder = codecs.getincrementaldecoder(self.charset)(errors='replace')

        echo = HttpRequest(
            method=self.options.method,
            url=self.options.url,
            headers=normalize_header_names(dict(raw.request.headers.items()), list(self.request.headers)),
            body=self.options.body,
            raw_body=self.request.raw_body,
            name=self.request.name,
        )

        self.response = HttpResponse(
            status_code=raw.status_code,
            status_message=raw.reason_phrase,
            http_version=raw.http_version.replace('HTTP/', ''),
            headers=headers,
            headers_size_in_bytes=estimate_headers_size(raw.headers.raw),
            timing_phases=self.timer.phases() if self.timer else TimingPhases(),
            request=echo,
            raw_response=raw,
        )

        if self.response.essence == EVENT_STREAM:
            logger.debug(f"Event stream from {self.options.url}; resolving before end of stream")
            self.completion.set_result(self.response)

        return self.response

    def on_data(self, chunk: bytes) -> None:
        """Append one body chunk."""
        self._append_text(self._decoder.decode(chunk))
        self.response.body_buffer.extend(chunk)
        self.response.body_size_in_bytes += len(chunk)
        if self.on_progress is not None:
            self.on_progress(len(chunk))

    def on_end(self) -> None:
        """Finish the body and resolve completion if still pending."""
        self._append_text(self._decoder.decode(b'', final=True))
        if self.timer is not None:
            self.timer.mark_end()
            self.response.timing_phases = self.timer.phases()

        logger.info(
            f"{self.options.method} {self.options.url} -> {self.response.status_code} "
            f"({self.response.body_size_in_bytes} bytes)"
        )
        if not self.completion.done():
            self.completion.set_result(self.response)

    def on_error(self, error: BaseException) -> None:
        """Reject completion, or log if the caller already has the response."""
        if not self.completion.done():
            self.completion.set_exception(error)
        else:
            logger.warning(f"Stream from {self.options.url} ended with error: {error}")

    def _append_text(self, text: str) -> None:
        if not text:
            return
        if self.settings.decode_escaped_unicode_characters:
            text = decode_escaped_unicode(text)
        self.response.body += text

    async def _read(self, raw: httpx.Response) -> None:
        try:
            async for chunk in raw.aiter_bytes():
                self.on_data(chunk)
        except httpx.TransportError as e:
            error = NetworkError(f"Failed reading response from {self.options.url}: {e}")
            error.__cause__ = e
            self.on_error(error)
        except Exception as e:
            self.on_error(e)
        else:
            self.on_end()
        finally:
            await raw.aclose()

    async def consume(self, raw: httpx.Response) -> HttpResponse:
        """Drive the events for ``raw`` and wait for completion.

        Args:
            raw: Response opened with ``stream=True``

        Returns:
            The HttpResponse, complete unless it is an event stream
        """
        try:
            self.on_response(raw)
        except Exception as e:
            await raw.aclose()
            self.on_error(e)
            return await self.completion

        reader = asyncio.ensure_future(self._read(raw))
        self.response.attach_reader(reader)
        try:
            return await self.completion
        except asyncio.CancelledError:
            reader.cancel()
            raise
