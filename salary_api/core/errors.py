"""Error types raised by the salary lookup pipeline.

None of these carry an HTTP status: the route boundary maps every one of
them to the same masked 500 response and logs the detail.
"""


class SalaryLookupError(Exception):
    """Base class for failures while building a salary estimate."""


class ConfigurationError(SalaryLookupError):
    """A required upstream URL or header set is not configured."""


class UpstreamTransportError(SalaryLookupError):
    """The upstream answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamPayloadError(UpstreamTransportError):
    """The upstream answered successfully but the body had an unexpected shape."""


class NoMatchError(SalaryLookupError):
    """Company or job-title search returned no candidates."""
