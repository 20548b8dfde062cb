"""Exception hierarchy for the dispatch pipeline."""


class DispatchError(Exception):
    """Base class for all errors raised while dispatching a request."""


class ConfigurationError(DispatchError):
    """Raised for an unparsable request URL or invalid settings."""


class AuthResolutionError(DispatchError):
    """Raised when an auth hook cannot be resolved before the request is sent.

    Covers failures obtaining a Cognito session token and failures computing
    an AWS signature.
    """


class NetworkError(DispatchError):
    """Raised for connection-level failures reported by the transport.

    Never retried by the pipeline; retry policy belongs to the caller.
    """
