"""Error taxonomy for the scoring pipeline.

Service-side failures (ServiceUnavailable, MalformedResponse) are always
recovered inside a ladder and never reach callers. ConfigurationError and
InputError are raised before any reasoning call is made.
"""

import re

CREDIT_ERROR_MARKERS = (
    "credit balance",
    "insufficient",
    "invalid_request_error",
    "authentication_error",
    "invalid x-api-key",
)
# HTTP 400/401 as SDKs and gateways report them, e.g. "Error code: 401"
AUTH_STATUS_RE = re.compile(r"\b(status code|error code|api error):?\s*40[01]\b")


class PortfolioScannerError(Exception):
    """Base class for all scanner errors."""


class ServiceUnavailable(PortfolioScannerError):
    """The reasoning service call raised or timed out."""


class MalformedResponse(PortfolioScannerError):
    """The reasoning service answered, but the text failed extraction or validation."""


class ParseError(MalformedResponse):
    """No JSON object could be extracted from the response text."""


class ConfigurationError(PortfolioScannerError):
    """Unknown evaluation mode, invalid weight table or broken calibration."""


class InputError(PortfolioScannerError):
    """A required applicant field is missing or has the wrong shape."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def is_credit_error(detail: str) -> bool:
    """Return True when a service error message points at billing or auth problems."""
    lowered = detail.lower()
    if any(marker in lowered for marker in CREDIT_ERROR_MARKERS):
        return True
    return bool(AUTH_STATUS_RE.search(lowered))
