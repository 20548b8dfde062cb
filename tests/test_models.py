"""Tests for the request and response models."""

import pytest

from httpdispatch.http.headers import HeaderMap
from httpdispatch.models import HttpRequest, HttpResponse


class TestHttpRequest:
    """Test HttpRequest construction."""

    def test_method_upper_cased(self):
        assert HttpRequest("patch", "https://example.com/").method == "PATCH"

    def test_headers_coerced(self):
        request = HttpRequest("GET", "https://example.com/", {"Accept": "text/html"})
        assert isinstance(request.headers, HeaderMap)
        assert request.headers["accept"] == "text/html"

    def test_defaults(self):
        request = HttpRequest("GET", "https://example.com/")
        assert len(request.headers) == 0
        assert request.body is None
        assert request.underlying_request is None


class TestHttpResponse:
    """Test HttpResponse helpers."""

    def make_response(self, headers):
        return HttpResponse(status_code=200, status_message="OK", http_version="1.1", headers=headers)

    @pytest.mark.parametrize("headers, essence", [
        ({"Content-Type": "text/event-stream; charset=utf-8"}, "text/event-stream"),
        ({"content-type": "Application/JSON"}, "application/json"),
        ({}, None),
    ])
    def test_essence(self, headers, essence):
        assert self.make_response(headers).essence == essence

    def test_finished_without_reader(self):
        assert self.make_response({}).finished

    @pytest.mark.asyncio
    async def test_wait_finished_without_reader(self):
        response = self.make_response({})
        await response.wait_finished()
        assert response.finished
