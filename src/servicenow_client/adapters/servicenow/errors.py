from __future__ import annotations


class ServiceNowError(Exception):
    """Base class for ServiceNow client errors."""


class ConfigurationError(ServiceNowError, ValueError):
    """A required construction argument is missing or unusable."""


class TransportError(ServiceNowError):
    """The request could not be sent or the response could not be received."""


class RemoteError(ServiceNowError):
    """ServiceNow answered with an HTTP error status (>= 400)."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"ServiceNow returned the HTTP error code: {status_code}")


class EncodingError(ServiceNowError):
    """An outgoing record could not be serialized."""


class DecodingError(ServiceNowError):
    """A response body did not match the expected JSON envelope."""
