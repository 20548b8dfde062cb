"""Logical request model.

A logical request is what the authoring tool hands to the dispatcher. The
pipeline treats it as read-only so the caller can reuse it, e.g. to retry.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Iterable, Optional, Union

from httpdispatch.http.headers import HeaderMap

RequestBody = Union[str, bytes, Any]


@dataclass
class HttpRequest:
    """A request as authored by the user.

    Attributes:
        method: HTTP method
        url: Target URL as written
        headers: Case-insensitive header mapping
        body: Text, bytes, a readable byte source or an (async) byte iterator
        raw_body: Body text as originally written, before file inclusion
        name: Human-readable request name
    """

    method: str
    url: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Optional[RequestBody] = None
    raw_body: Optional[str] = None
    name: Optional[str] = None
    underlying_request: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Coerce headers into a HeaderMap and upper-case the method."""
        self.method = self.method.upper()
        if not isinstance(self.headers, HeaderMap):
            self.headers = HeaderMap(self.headers)

    def set_underlying_request(self, handle: Any) -> None:
        """Record the cancelable handle of the dispatch in flight."""
        self.underlying_request = handle


async def materialize_body(body: Optional[RequestBody]) -> Optional[Union[str, bytes]]:
    """Read a request body fully into memory.

    Strings and bytes are returned unchanged. Readable objects are read once
    (``read()`` may be sync or async); iterables of byte chunks are joined.

    Args:
        body: Request body in any supported form

    Returns:
        The body as ``str`` or ``bytes``, or None when there is no body

    Raises:
        TypeError: If the body type is not supported
    """
    if body is None or isinstance(body, (str, bytes)):
        return body

    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)

    if hasattr(body, 'read'):
        data = body.read()
        if inspect.isawaitable(data):
            data = await data
        return data.encode('utf-8') if isinstance(data, str) else bytes(data)

    if isinstance(body, AsyncIterable):
        chunks = []
        async for chunk in body:
            chunks.append(chunk)
        return b''.join(chunks)

    if isinstance(body, Iterable):
        return b''.join(body)

    raise TypeError(f"Unsupported request body type: {type(body).__name__}")

