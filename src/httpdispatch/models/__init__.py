"""Request and response data models."""

from httpdispatch.models.request import HttpRequest, materialize_body
from httpdispatch.models.response import HttpResponse, TimingPhases

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "TimingPhases",
    "materialize_body",
]
