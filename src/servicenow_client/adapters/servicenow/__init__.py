from __future__ import annotations

from servicenow_client.adapters.servicenow.client import ServiceNow, ServiceNowClient
from servicenow_client.adapters.servicenow.errors import (
    ConfigurationError,
    DecodingError,
    EncodingError,
    RemoteError,
    ServiceNowError,
    TransportError,
)
from servicenow_client.adapters.servicenow.models import Incident, Link, LinkedValue

__all__ = [
    "ConfigurationError",
    "DecodingError",
    "EncodingError",
    "Incident",
    "Link",
    "LinkedValue",
    "RemoteError",
    "ServiceNow",
    "ServiceNowClient",
    "ServiceNowError",
    "TransportError",
]
