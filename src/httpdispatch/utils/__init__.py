"""Utility functions for httpdispatch."""

from httpdispatch.utils.file import (
    ensure_dir,
    read_existing_file,
)
from httpdispatch.utils.text import (
    MimeType,
    decode_escaped_unicode,
    encode_url,
    get_host,
    parse_mime,
    resolve_charset,
)

__all__ = [
    "ensure_dir",
    "read_existing_file",
    "MimeType",
    "decode_escaped_unicode",
    "encode_url",
    "get_host",
    "parse_mime",
    "resolve_charset",
]
