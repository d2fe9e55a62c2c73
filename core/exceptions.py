"""Custom exception hierarchy for the forwarding proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class ForwardError(ProxyError):
    """Raised when a forwarded request cannot be completed.

    Attributes:
        message: Error message
        target: Destination URL named by the trigger header (optional)
        status_code: HTTP status reported to the caller
    """

    status_code = 500

    def __init__(self, message: str, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class BodyReadError(ForwardError):
    """Inbound request body could not be read."""


class RequestBuildError(ForwardError):
    """Outbound request could not be constructed (bad method or URL)."""


class UpstreamError(ForwardError):
    """Raised when the outbound call fails at the transport level."""

    status_code = 502


class UpstreamTimeoutError(UpstreamError):
    """Raised when the outbound call times out in the HTTP client."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to reach the upstream."""


class RelayError(ForwardError):
    """Upstream body failed mid-copy, after status and headers were sent."""
