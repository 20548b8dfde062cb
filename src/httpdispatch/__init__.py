"""
httpdispatch - Request dispatch pipeline for an HTTP request-authoring tool.

This package sends authored HTTP requests with per-request authentication,
proxy routing, client certificates and persistent cookies, and decodes the
streamed response into a structured result.
"""

__version__ = "1.0.0"

from httpdispatch.config import HostCertificate, Settings
from httpdispatch.errors import AuthResolutionError, ConfigurationError, DispatchError, NetworkError
from httpdispatch.http.client import HttpClient, PendingRequest
from httpdispatch.models import HttpRequest, HttpResponse

__all__ = [
    "AuthResolutionError",
    "ConfigurationError",
    "DispatchError",
    "HostCertificate",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "NetworkError",
    "PendingRequest",
    "Settings",
    "__version__",
]
