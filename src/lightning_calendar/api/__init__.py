"""Host-facing payload models and JSON serialization."""

from __future__ import annotations

from .models import ConflictReportPayload, EventPayload
from .serializers import dumps, loads, parse_event, serialize_conflicts, serialize_event, serialize_view_data, to_host_payload

__all__ = [
    "ConflictReportPayload",
    "EventPayload",
    "dumps",
    "loads",
    "parse_event",
    "serialize_conflicts",
    "serialize_event",
    "serialize_view_data",
    "to_host_payload",
]
