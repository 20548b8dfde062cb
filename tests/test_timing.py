"""Tests for timing phase collection."""

import pytest

from httpdispatch.http.timing import TraceCollector


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr("httpdispatch.http.timing.time.perf_counter", fake)
    return fake


async def emit(collector, clock, event_name, at):
    clock.now = at
    await collector(event_name, {})


class TestTraceCollector:
    """Test TraceCollector phases."""

    @pytest.mark.asyncio
    async def test_full_request(self, clock):
        collector = TraceCollector()
        await emit(collector, clock, "connection.connect_tcp.started", 100.010)
        await emit(collector, clock, "connection.connect_tcp.complete", 100.030)
        await emit(collector, clock, "connection.start_tls.started", 100.030)
        await emit(collector, clock, "connection.start_tls.complete", 100.080)
        await emit(collector, clock, "http11.send_request_headers.started", 100.080)
        await emit(collector, clock, "http11.send_request_headers.complete", 100.085)
        await emit(collector, clock, "http11.receive_response_headers.started", 100.085)
        await emit(collector, clock, "http11.receive_response_headers.complete", 100.185)
        clock.now = 100.190
        collector.mark_response()
        clock.now = 100.290
        collector.mark_end()

        phases = collector.phases()

        assert phases.wait == pytest.approx(10.0)
        assert phases.tcp == pytest.approx(20.0)
        assert phases.tls == pytest.approx(50.0)
        assert phases.request == pytest.approx(5.0)
        assert phases.first_byte == pytest.approx(100.0)
        assert phases.download == pytest.approx(100.0)
        assert phases.total == pytest.approx(290.0)
        assert phases.dns is None

    @pytest.mark.asyncio
    async def test_reused_connection_has_no_tcp_or_tls(self, clock):
        collector = TraceCollector()
        await emit(collector, clock, "http11.send_request_headers.started", 100.0)
        await emit(collector, clock, "http11.send_request_headers.complete", 100.001)

        phases = collector.phases()

        assert phases.tcp is None
        assert phases.tls is None
        assert phases.total is None

    @pytest.mark.asyncio
    async def test_first_timestamp_kept(self, clock):
        collector = TraceCollector()
        await emit(collector, clock, "connection.connect_tcp.started", 100.0)
        await emit(collector, clock, "connection.connect_tcp.complete", 100.010)
        await emit(collector, clock, "connection.connect_tcp.started", 101.0)
        await emit(collector, clock, "connection.connect_tcp.complete", 101.500)

        assert collector.phases().tcp == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_ignores_unknown_events(self, clock):
        collector = TraceCollector()
        await emit(collector, clock, "noise", 100.5)
        assert collector.phases().wait is None
