from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import ValidationError

from servicenow_client.config.settings import Settings


@dataclass(frozen=True)
class ConfigValidationIssue:
    path: str
    message: str


class ConfigValidationError(ValueError):
    def __init__(self, issues: Iterable[ConfigValidationIssue]):
        self.issues = list(issues)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = ["Configuration is invalid:"]
        for issue in self.issues:
            lines.append(f"- {issue.path}: {issue.message}")
        return "\n".join(lines)


def issues_from_pydantic_error(error: ValidationError) -> list[ConfigValidationIssue]:
    issues: list[ConfigValidationIssue] = []
    for item in error.errors(include_url=False):
        loc = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        msg = item.get("msg", "Invalid value")
        issues.append(ConfigValidationIssue(path=loc, message=msg))
    return issues


def validate_settings(settings: Settings) -> None:
    issues: list[ConfigValidationIssue] = []

    log_level = settings.observability.log_level.upper()
    allowed_levels = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
    if log_level not in allowed_levels:
        issues.append(
            ConfigValidationIssue(
                path="observability.log_level",
                message=(
                    f"Unsupported log level {settings.observability.log_level!r} "
                    f"(allowed: {sorted(allowed_levels)})"
                ),
            )
        )

    servicenow = settings.servicenow
    if not servicenow.instance.strip():
        issues.append(ConfigValidationIssue("servicenow.instance", "Must not be empty"))
    elif "." in servicenow.instance or "/" in servicenow.instance:
        issues.append(
            ConfigValidationIssue(
                path="servicenow.instance",
                message=(
                    "Expected the instance name only (e.g. 'acme' for "
                    "https://acme.service-now.com), not a host or URL."
                ),
            )
        )
    if not servicenow.username.strip():
        issues.append(ConfigValidationIssue("servicenow.username", "Must not be empty"))
    if not servicenow.password.get_secret_value():
        issues.append(ConfigValidationIssue("servicenow.password", "Must not be empty"))

    if issues:
        raise ConfigValidationError(issues)
