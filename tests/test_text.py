"""Tests for text, MIME and URL utilities."""

import pytest

from httpdispatch.utils.text import decode_escaped_unicode, encode_url, get_host, parse_mime, resolve_charset


class TestParseMime:
    """Test Content-Type parsing."""

    def test_essence_and_charset(self):
        mime = parse_mime("Application/JSON; charset=UTF-8")
        assert mime.essence == "application/json"
        assert mime.charset == "UTF-8"

    def test_quoted_charset(self):
        assert parse_mime('text/html; charset="iso-8859-1"').charset == "iso-8859-1"

    def test_no_parameters(self):
        mime = parse_mime("text/event-stream")
        assert mime.essence == "text/event-stream"
        assert mime.charset is None


class TestResolveCharset:
    """Test decode charset selection."""

    @pytest.mark.parametrize("content_type, expected", [
        (None, "utf-8"),
        ("text/plain", "utf-8"),
        ("text/plain; charset=latin-1", "latin-1"),
        ("text/plain; charset=utf8", "utf8"),
        ("text/plain; charset=no-such-charset", "utf-8"),
        ("text/plain; charset=hex", "utf-8"),
        ("text/plain; charset=base64", "utf-8"),
        ("text/plain; charset=zlib", "utf-8"),
        ("text/plain; charset=rot13", "utf-8"),
    ])
    def test_resolve(self, content_type, expected):
        assert resolve_charset(content_type) == expected


class TestDecodeEscapedUnicode:
    """Test \\uXXXX unescaping."""

    def test_decodes_escape(self):
        assert decode_escaped_unicode(r'{"name": "caf\u00e9"}') == '{"name": "café"}'

    def test_quote_stays_escaped(self):
        assert decode_escaped_unicode(r'"say \u0022hi\u0022"') == r'"say \"hi\""'

    def test_plain_text_untouched(self):
        assert decode_escaped_unicode("no escapes here") == "no escapes here"


class TestEncodeUrl:
    """Test URL encoding."""

    def test_encodes_spaces_and_unicode(self):
        assert encode_url("http://example.com/a b?q=é") == "http://example.com/a%20b?q=%C3%A9"

    def test_preserves_valid_escapes(self):
        assert encode_url("http://example.com/a%20b") == "http://example.com/a%20b"

    def test_encodes_stray_percent(self):
        assert encode_url("http://example.com/100%") == "http://example.com/100%25"


class TestGetHost:
    """Test host[:port] extraction."""

    def test_keeps_explicit_port(self):
        assert get_host("https://Example.com:8443/path") == "example.com:8443"

    def test_no_default_port(self):
        assert get_host("https://example.com/path") == "example.com"

    def test_strips_userinfo(self):
        assert get_host("http://user:pw@example.com/") == "example.com"
