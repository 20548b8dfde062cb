"""Text, MIME and URL parsing utilities."""

import codecs
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

# Characters left untouched when encoding a URL, on top of alphanumerics
_URL_SAFE = "!#$&'()*+,-./:;=?@[]_~"
_INVALID_PERCENT = re.compile(r'%(?![0-9A-Fa-f]{2})')
_UNICODE_ESCAPE = re.compile(r'\\u([0-9a-fA-F]{4})')


@dataclass(frozen=True)
class MimeType:
    """Parsed ``Content-Type`` value."""

    type: str
    subtype: str
    charset: Optional[str] = None

    @property
    def essence(self) -> str:
        """Media type without parameters, e.g. ``text/event-stream``."""
        if self.subtype:
            return f"{self.type}/{self.subtype}"
        return self.type


def parse_mime(content_type: str) -> MimeType:
    """Parse a ``Content-Type`` header value.

    Args:
        content_type: Header value, e.g. ``application/json; charset=utf-8``

    Returns:
        MimeType with lower-cased type/subtype and the declared charset, if any
    """
    media, *params = content_type.split(';')
    type_, _, subtype = media.strip().lower().partition('/')

    charset = None
    for param in params:
        name, _, value = param.strip().partition('=')
        if name.strip().lower() == 'charset':
            charset = value.strip().strip('"\'') or None
            break

    return MimeType(type_, subtype.strip(), charset)


def resolve_charset(content_type: Optional[str], default: str = 'utf-8') -> str:
    """Pick the decode charset for a response.

    Falls back to ``default`` when no charset is declared, Python has no
    codec registered under the declared name, or the codec is not a text
    encoding (``hex``, ``base64``, ``zlib``, ``rot13`` and the like).
    """
    if not content_type:
        return default

    charset = parse_mime(content_type).charset
    if not charset:
        return default

    try:
        info = codecs.lookup(charset)
    except LookupError:
        return default
    if not info._is_text_encoding:
        return default
    return charset


def decode_escaped_unicode(text: str) -> str:
    r"""Replace literal ``\uXXXX`` escapes with the characters they name.

    A decoded double quote is emitted as ``\"`` so JSON string quoting in the
    body stays intact.
    """
    def replace(match):
        char = chr(int(match.group(1), 16))
        return '\\"' if char == '"' else char

    return _UNICODE_ESCAPE.sub(replace, text)


def encode_url(url: str) -> str:
    """Percent-encode characters that are not legal in a URL.

    Existing valid ``%XX`` escapes are preserved; a ``%`` that does not start
    one is encoded as ``%25``.

    Args:
        url: URL as typed by the user

    Returns:
        Encoded URL
    """
    url = _INVALID_PERCENT.sub('%25', url)
    encoded = []
    for char in url:
        if char.isascii() and (char.isalnum() or char in _URL_SAFE or char == '%'):
            encoded.append(char)
        else:
            encoded.append(''.join(f'%{b:02X}' for b in char.encode('utf-8')))
    return ''.join(encoded)


def get_host(url: str) -> str:
    """Extract ``host[:port]`` from a URL exactly as written.

    Args:
        url: URL to parse

    Returns:
        Lower-cased network location without userinfo (e.g. 'example.com:8443')
    """
    netloc = urlsplit(url).netloc
    return netloc.rpartition('@')[2].lower()
