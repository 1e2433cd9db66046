from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

GROUP_KEY_FIELD = "u_other_reference_1"

# Assigned by ServiceNow; never part of a create payload.
READ_ONLY_FIELDS = frozenset({"number", "priority", "sys_id"})


class _ServiceNowModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Link(_ServiceNowModel):
    """Reference element as returned by the Table API: {"link": ..., "value": ...}."""

    link: str | None = None
    value: str


def _keep_number_as_text(value: Any) -> Any:
    # Some instances quote these fields, some don't. Keep the text as received.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


NumericText = Annotated[str, BeforeValidator(_keep_number_as_text)]

# Either a plain display value or a reference object; the link form is tried first.
LinkedValue = Link | str


class Incident(_ServiceNowModel):
    assignment_group: LinkedValue | None = Field(default=None, union_mode="left_to_right")
    contact_type: str | None = None
    caller_id: LinkedValue | None = Field(default=None, union_mode="left_to_right")
    comments: str | None = None
    description: str | None = None
    group_key: str | None = Field(default=None, alias=GROUP_KEY_FIELD)
    impact: NumericText | None = None
    number: str | None = None
    priority: str | None = None
    short_description: str | None = None
    state: NumericText | None = None
    sys_id: str | None = None
    urgency: NumericText | None = None

    def to_payload(self, *, exclude: frozenset[str] = frozenset()) -> dict[str, Any]:
        """
        Wire representation of the incident.

        Unset fields and empty strings are left out rather than sent as null or "".
        """
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {
            key: value
            for key, value in data.items()
            if key not in exclude and value != ""
        }


class IncidentResponse(_ServiceNowModel):
    result: Incident


class IncidentsResponse(_ServiceNowModel):
    result: list[Incident]
