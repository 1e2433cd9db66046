from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from servicenow_client.adapters.http_util import build_http_client
from servicenow_client.adapters.servicenow.client import ServiceNowClient
from servicenow_client.config.settings import Settings
from servicenow_client.observability.logger import configure_logging


def setup_logging(settings: Settings) -> None:
    configure_logging(
        log_level=settings.observability.log_level,
        log_format=settings.observability.effective_log_format,
    )


@contextmanager
def open_client(settings: Settings) -> Iterator[ServiceNowClient]:
    """Yield a client whose transport honours the configured timeout and TLS options."""
    servicenow = settings.servicenow
    with build_http_client(
        timeout_seconds=servicenow.timeout_seconds,
        verify_tls=servicenow.verify_tls,
        trust_env=servicenow.trust_env,
    ) as http_client:
        yield ServiceNowClient(
            servicenow.instance,
            servicenow.username,
            servicenow.password.get_secret_value(),
            http_client=http_client,
        )
