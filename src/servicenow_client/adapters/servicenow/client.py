from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from typing import Any, Literal, Protocol, TypeVar

import httpx
import structlog
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from servicenow_client.adapters.http_util import build_http_client
from servicenow_client.adapters.servicenow.errors import (
    ConfigurationError,
    DecodingError,
    EncodingError,
    RemoteError,
    TransportError,
)
from servicenow_client.adapters.servicenow.models import (
    READ_ONLY_FIELDS,
    Incident,
    IncidentResponse,
    IncidentsResponse,
)

log = structlog.get_logger(__name__)

SERVICENOW_BASE_URL = "https://{instance}.service-now.com"
TABLE_API_PATH = "/api/now/v2/table/{table}"
INCIDENT_TABLE = "incident"

_EnvelopeT = TypeVar("_EnvelopeT", IncidentResponse, IncidentsResponse)


class ServiceNow(Protocol):
    def create_incident(self, incident: Incident) -> Incident: ...

    def get_incidents(self, params: Mapping[str, str]) -> list[Incident]: ...

    def update_incident(self, incident: Incident) -> Incident: ...


class ServiceNowClient:
    """
    Blocking client for the ServiceNow Table API.

    The instance never mutates after construction and can be shared between threads.
    No retries and no timeouts are applied here: inject an `httpx.Client` configured
    with a timeout when bounded latency matters.
    """

    def __init__(
        self,
        instance: str,
        username: str,
        password: str,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not instance:
            raise ConfigurationError("Missing instance")
        if not username:
            raise ConfigurationError("Missing username")
        if not password:
            raise ConfigurationError("Missing password")

        base_url = SERVICENOW_BASE_URL.format(instance=instance)
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Invalid ServiceNow instance name: {instance!r}") from exc
        if not url.host:
            raise ConfigurationError(f"Invalid ServiceNow instance name: {instance!r}")

        self.base_url = base_url
        credentials = f"{username}:{password}".encode()
        self.auth_header = f"Basic {base64.b64encode(credentials).decode('ascii')}"

        self._owns_http_client = http_client is None
        self._http = http_client or build_http_client()

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> ServiceNowClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> None:
        self.close()

    def create_incident(self, incident: Incident) -> Incident:
        """Create an incident and return the record as stored by ServiceNow."""
        log.info("servicenow.incident.create")

        body = _encode(incident, exclude=READ_ONLY_FIELDS)
        response = self.create(INCIDENT_TABLE, body)
        created = _decode(IncidentResponse, response).result

        log.info("servicenow.incident.created", number=created.number, sys_id=created.sys_id)
        return created

    def get_incidents(self, params: Mapping[str, str]) -> list[Incident]:
        """Query incidents; `params` are passed through as Table API query parameters."""
        log.info("servicenow.incident.get", params=dict(params))

        response = self.get(INCIDENT_TABLE, params)
        return _decode(IncidentsResponse, response).result

    def update_incident(self, incident: Incident) -> Incident:
        """Replace the fields of the incident identified by `incident.sys_id`."""
        log.info("servicenow.incident.update", number=incident.number, sys_id=incident.sys_id)

        if not incident.sys_id:
            log.error("servicenow.incident.update_missing_sys_id", number=incident.number)
            raise EncodingError("sys_id is required to update an incident")

        body = _encode(incident)
        response = self.update(INCIDENT_TABLE, body, incident.sys_id)
        updated = _decode(IncidentResponse, response).result

        log.info("servicenow.incident.updated", number=updated.number, sys_id=updated.sys_id)
        return updated

    def create(self, table: str, body: bytes) -> bytes:
        return self._do_request("POST", self._table_url(table), content=body)

    def get(self, table: str, params: Mapping[str, str]) -> bytes:
        return self._do_request("GET", self._table_url(table), params=dict(params))

    def update(self, table: str, body: bytes, record_id: str) -> bytes:
        return self._do_request("PUT", f"{self._table_url(table)}/{record_id}", content=body)

    def _table_url(self, table: str) -> str:
        return self.base_url + TABLE_API_PATH.format(table=table)

    def _do_request(
        self,
        method: Literal["GET", "POST", "PUT"],
        url: str,
        *,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> bytes:
        headers = {
            "Content-Type": "application/json",
            "Authorization": self.auth_header,
        }
        try:
            with self._http.stream(
                method, url, params=params, content=content, headers=headers
            ) as response:
                if response.status_code >= 400:
                    log.error(
                        "servicenow.request.http_error",
                        method=method,
                        url=url,
                        status=response.status_code,
                    )
                    raise RemoteError(response.status_code)
                return response.read()
        except httpx.RequestError as exc:
            log.error("servicenow.request.transport_error", method=method, url=url, error=str(exc))
            raise TransportError(f"Error sending the request to {url}: {exc}") from exc


def _encode(incident: Incident, *, exclude: frozenset[str] = frozenset()) -> bytes:
    try:
        return json.dumps(incident.to_payload(exclude=exclude)).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        log.error("servicenow.incident.encode_failed", error=str(exc))
        raise EncodingError(f"Error while marshalling the incident: {exc}") from exc


def _decode(model: type[_EnvelopeT], body: bytes) -> _EnvelopeT:
    # Numbers stay as their literal text, e.g. 1.50 is not shortened to 1.5.
    try:
        return model.model_validate(json.loads(body, parse_float=str, parse_int=str))
    except (ValidationError, ValueError) as exc:
        log.error("servicenow.incident.decode_failed", error=str(exc))
        raise DecodingError(f"Error while unmarshalling the incident: {exc}") from exc
