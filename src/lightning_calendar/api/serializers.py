from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping

import orjson
from pydantic import ValidationError as PayloadError
from pydantic.alias_generators import to_camel

from ..domain import ConflictReport, Event, ValidationError
from .models import ConflictReportPayload, EventPayload


def parse_event(payload: Mapping[str, Any] | bytes | str) -> Event:
    """Validate a host payload (camelCase or snake_case, raw JSON allowed) into an event."""

    try:
        data = loads(payload) if isinstance(payload, (bytes, str)) else payload
    except orjson.JSONDecodeError as exc:  # noqa: BLE001
        raise ValidationError("Event payload is not valid JSON", errors=[{"field": "event", "message": str(exc)}]) from exc
    try:
        model = EventPayload.model_validate(data)
    except PayloadError as exc:  # noqa: BLE001
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]) or "event", "message": error["msg"]}
            for error in exc.errors()
        ]
        raise ValidationError(f"Invalid event payload: {exc.error_count()} error(s)", errors=errors) from exc
    return model.to_domain()


def serialize_event(event: Event) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump(by_alias=True, mode="json")


def serialize_conflicts(report: ConflictReport) -> Dict[str, Any]:
    return ConflictReportPayload.from_domain(report).model_dump(by_alias=True, mode="json")


def to_host_payload(value: Any) -> Any:
    """Convert view data, stats and domain objects into camelCase JSON-ready structures."""

    if isinstance(value, Event):
        return serialize_event(value)
    if isinstance(value, ConflictReport):
        return serialize_conflicts(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {to_camel(str(key)): to_host_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_host_payload(item) for item in value]
    return value


def serialize_view_data(view_data: Dict[str, Any]) -> Dict[str, Any]:
    return to_host_payload(view_data)


def dumps(value: Any) -> bytes:
    return orjson.dumps(to_host_payload(value))


def loads(payload: bytes | str) -> Any:
    return orjson.loads(payload)
