"""Request timing from httpcore trace events.

httpx forwards a ``trace`` extension callback down to httpcore, which
reports ``<step>.started`` / ``<step>.complete`` events for each phase of a
request. The collector timestamps them and turns the pairs into phases.
"""

import time
from typing import Any, Dict, Optional

from httpdispatch.models.response import TimingPhases

# httpcore step name -> timing phase
_PHASE_STEPS = {
    'connection.connect_tcp': 'tcp',
    'connection.connect_unix_socket': 'tcp',
    'connection.start_tls': 'tls',
    'http11.send_request_headers': 'request',
    'http11.send_request_body': 'request',
    'http2.send_request_headers': 'request',
    'http2.send_request_body': 'request',
}
_FIRST_BYTE_STEPS = (
    'http11.receive_response_headers',
    'http2.receive_response_headers',
)


class TraceCollector:
    """Callable passed as the ``trace`` request extension."""

    def __init__(self):
        self.start = time.perf_counter()
        self._events: Dict[str, float] = {}
        self.response_at: Optional[float] = None
        self.end_at: Optional[float] = None

    async def __call__(self, event_name: str, info: Dict[str, Any]) -> None:
        step, _, state = event_name.rpartition('.')
        if not step or state not in ('started', 'complete', 'failed'):
            return
        # Keep the first timestamp; redirects and auth retries re-emit events
        self._events.setdefault(event_name, time.perf_counter())

    def _span_ms(self, step: str) -> Optional[float]:
        started = self._events.get(f'{step}.started')
        completed = self._events.get(f'{step}.complete')
        if started is None or completed is None or completed < started:
            return None
        return (completed - started) * 1000.0

    def mark_response(self) -> None:
        """Record that response headers were handed to the consumer."""
        self.response_at = time.perf_counter()

    def mark_end(self) -> None:
        """Record that the body was fully consumed."""
        self.end_at = time.perf_counter()

    def phases(self) -> TimingPhases:
        """Build the timing breakdown collected so far."""
        phases = TimingPhases()

        for step, phase in _PHASE_STEPS.items():
            span = self._span_ms(step)
            if span is not None:
                setattr(phases, phase, (getattr(phases, phase) or 0.0) + span)

        for step in _FIRST_BYTE_STEPS:
            span = self._span_ms(step)
            if span is not None:
                phases.first_byte = span
                break

        first_event = min(self._events.values(), default=None)
        if first_event is not None:
            phases.wait = (first_event - self.start) * 1000.0

        if self.response_at is not None and self.end_at is not None:
            phases.download = (self.end_at - self.response_at) * 1000.0
        if self.end_at is not None:
            phases.total = (self.end_at - self.start) * 1000.0
        return phases
