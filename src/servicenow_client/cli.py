"""CLI commands for servicenow-client.

This module provides command-line utilities for:
- Validating configuration
- Dumping configuration (with secrets redacted)
- Creating, querying and updating incidents
"""
from __future__ import annotations

import argparse
import json
import sys
from importlib import metadata
from typing import Any

from servicenow_client.adapters.servicenow.errors import ServiceNowError
from servicenow_client.adapters.servicenow.models import Incident
from servicenow_client.config.load import load_settings
from servicenow_client.config.redact import redact_settings_dict
from servicenow_client.config.validate import ConfigValidationError
from servicenow_client.runtime import open_client, setup_logging

# Option dests, named after the Incident attributes they set.
_INCIDENT_OPTIONS: tuple[str, ...] = (
    "short_description",
    "description",
    "comments",
    "group_key",
    "assignment_group",
    "caller_id",
    "contact_type",
    "impact",
    "urgency",
    "state",
)


def _version() -> str:
    try:
        return metadata.version("servicenow-client")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _incident_from_args(args: argparse.Namespace) -> Incident:
    fields: dict[str, Any] = {}
    for name in _INCIDENT_OPTIONS:
        value = getattr(args, name, None)
        if value is not None:
            fields[name] = value
    sys_id = getattr(args, "sys_id", None)
    if sys_id:
        fields["sys_id"] = sys_id
    return Incident(**fields)


def _incident_json(incident: Incident) -> dict[str, Any]:
    return incident.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse_param(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    return key, value


def cmd_validate_config(args: argparse.Namespace) -> int:
    """Validate configuration and exit with appropriate code.

    Exit codes:
        0: Configuration is valid
        1: Configuration is invalid
    """
    try:
        settings = load_settings()
    except ConfigValidationError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    print("✓ Configuration is valid")
    print(f"  - Instance: https://{settings.servicenow.instance}.service-now.com")
    print(f"  - User: {settings.servicenow.username}")
    print(f"  - Timeout: {settings.servicenow.timeout_seconds or 'none'}")
    return 0


def cmd_dump_config(args: argparse.Namespace) -> int:
    """Dump current configuration as JSON (with secrets redacted)."""
    try:
        settings = load_settings()
    except ConfigValidationError as e:
        print(f"✗ Failed to load configuration: {e}", file=sys.stderr)
        return 1
    data = settings.model_dump(mode="json")
    print(json.dumps(redact_settings_dict(data), indent=2, default=str))
    return 0


def cmd_create_incident(args: argparse.Namespace) -> int:
    """Create an incident and print the stored record as JSON."""
    try:
        settings = load_settings()
        setup_logging(settings)
        with open_client(settings) as client:
            created = client.create_incident(_incident_from_args(args))
    except (ConfigValidationError, ServiceNowError) as e:
        print(f"✗ Failed to create incident: {e}", file=sys.stderr)
        return 1
    print(json.dumps(_incident_json(created), indent=2))
    return 0


def cmd_get_incidents(args: argparse.Namespace) -> int:
    """Query incidents and print them as a JSON list."""
    params = dict(args.param or [])
    if args.limit is not None:
        params["sysparm_limit"] = str(args.limit)
    try:
        settings = load_settings()
        setup_logging(settings)
        with open_client(settings) as client:
            incidents = client.get_incidents(params)
    except (ConfigValidationError, ServiceNowError) as e:
        print(f"✗ Failed to get incidents: {e}", file=sys.stderr)
        return 1
    print(json.dumps([_incident_json(incident) for incident in incidents], indent=2))
    return 0


def cmd_update_incident(args: argparse.Namespace) -> int:
    """Update the incident identified by --sys-id and print the result as JSON."""
    try:
        settings = load_settings()
        setup_logging(settings)
        with open_client(settings) as client:
            updated = client.update_incident(_incident_from_args(args))
    except (ConfigValidationError, ServiceNowError) as e:
        print(f"✗ Failed to update incident: {e}", file=sys.stderr)
        return 1
    print(json.dumps(_incident_json(updated), indent=2))
    return 0


def _add_incident_options(parser: argparse.ArgumentParser, *, require_summary: bool) -> None:
    parser.add_argument("--short-description", required=require_summary)
    parser.add_argument("--description")
    parser.add_argument("--comments")
    parser.add_argument(
        "--group-key",
        help="Correlation key stored in u_other_reference_1",
    )
    parser.add_argument("--assignment-group", help="Assignment group name or sys_id")
    parser.add_argument("--caller-id", help="Caller user name or sys_id")
    parser.add_argument("--contact-type")
    parser.add_argument("--impact")
    parser.add_argument("--urgency")
    parser.add_argument("--state")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="servicenow-client",
        description="ServiceNow incident client",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser(
        "validate-config",
        help="Validate configuration and exit",
    )
    validate_parser.set_defaults(func=cmd_validate_config)

    dump_parser = subparsers.add_parser(
        "dump-config",
        help="Dump configuration as JSON (secrets redacted)",
    )
    dump_parser.set_defaults(func=cmd_dump_config)

    create_parser = subparsers.add_parser("create-incident", help="Create an incident")
    _add_incident_options(create_parser, require_summary=True)
    create_parser.set_defaults(func=cmd_create_incident)

    get_parser = subparsers.add_parser("get-incidents", help="Query incidents")
    get_parser.add_argument(
        "--param",
        action="append",
        type=_parse_param,
        metavar="KEY=VALUE",
        help="Table API query parameter (repeatable), e.g. active=true",
    )
    get_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Shortcut for sysparm_limit",
    )
    get_parser.set_defaults(func=cmd_get_incidents)

    update_parser = subparsers.add_parser("update-incident", help="Update an incident")
    update_parser.add_argument("--sys-id", required=True)
    _add_incident_options(update_parser, require_summary=False)
    update_parser.set_defaults(func=cmd_update_incident)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
