"""Normalization of caller-supplied event data into canonical :class:`Event` instances.

Callers hand the core loosely shaped mappings (camelCase or snake_case keys,
a singular ``category`` instead of ``categories``, ISO strings or datetime
objects). Everything is folded into one canonical shape here so the store,
the conflict detector and the view engine never deal with input variants.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from .enums import EventStatus
from .errors import ValidationError
from .models import (
    Attendee,
    ConferenceData,
    Event,
    Organizer,
    RecurrenceRule,
    Reminder,
    _pick,
    parse_datetime,
)

EventData = Union[Event, Mapping[str, Any]]


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)):
        return [value]
    return list(value)


def normalize_event_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Fold a singular ``category`` into ``categories``. Idempotent."""

    normalized = dict(data)
    categories: List[str] = []
    for item in _as_list(normalized.pop("categories", None)) + _as_list(normalized.pop("category", None)):
        text = str(item).strip()
        if text and text not in categories:
            categories.append(text)
    normalized["categories"] = categories
    return normalized


def build_event(data: EventData, *, index: Optional[int] = None) -> Event:
    """Validate ``data`` and return a canonical event.

    Raises :class:`ValidationError` listing every problem found; ``index``
    tags the errors when the item is part of a batch.
    """

    if isinstance(data, Event):
        _check_bounds(data, index)
        return data
    if not isinstance(data, Mapping):
        raise ValidationError("Event data must be a mapping", errors=[_error("event", "not a mapping", index)])

    record = normalize_event_data(data)
    errors: List[Dict[str, Any]] = []

    identifier = _pick(record, "id")
    title = _pick(record, "title")
    if identifier is None or str(identifier).strip() == "":
        errors.append(_error("id", "is required", index))
    if title is None or str(title).strip() == "":
        errors.append(_error("title", "is required", index))

    start = end = None
    raw_start = _pick(record, "start")
    if raw_start is None:
        errors.append(_error("start", "is required", index))
    else:
        try:
            start = parse_datetime(raw_start)
        except ValueError as exc:
            errors.append(_error("start", str(exc), index))
    raw_end = _pick(record, "end")
    if raw_end is not None:
        try:
            end = parse_datetime(raw_end)
        except ValueError as exc:
            errors.append(_error("end", str(exc), index))

    all_day = bool(_pick(record, "all_day", "allDay", default=False))
    if start is not None:
        if end is None:
            end = start
        if (start.tzinfo is None) != (end.tzinfo is None):
            errors.append(_error("end", "start and end must both be naive or both be aware", index))
        elif end < start:
            if all_day:
                end = start
            else:
                errors.append(_error("end", "start must not be after end", index))

    rule: Optional[RecurrenceRule] = None
    raw_rule = _pick(record, "recurrence_rule", "recurrenceRule")
    if raw_rule is not None:
        try:
            rule = RecurrenceRule.from_value(raw_rule)
        except (TypeError, ValueError) as exc:
            errors.append(_error("recurrence_rule", str(exc), index))
    recurring = bool(_pick(record, "recurring", default=raw_rule is not None))
    if recurring and raw_rule is None:
        errors.append(_error("recurrence_rule", "is required for recurring events", index))

    try:
        organizer = Organizer.from_record(record["organizer"]) if record.get("organizer") else None
        attendees = tuple(Attendee.from_record(item) for item in record.get("attendees") or ())
        reminders = tuple(Reminder.from_record(item) for item in record.get("reminders") or ())
        raw_conference = _pick(record, "conference_data", "conferenceData")
        conference = ConferenceData.from_record(raw_conference) if raw_conference else None
        status = EventStatus(_pick(record, "status", default=EventStatus.CONFIRMED))
    except (AttributeError, TypeError, ValueError) as exc:
        errors.append(_error("event", str(exc), index))
        organizer, attendees, reminders, conference, status = None, (), (), None, EventStatus.CONFIRMED

    if errors:
        label = f"Event {identifier}" if identifier else "Event"
        summary = "; ".join(f"{item['field']} {item['message']}" for item in errors)
        raise ValidationError(f"{label} is invalid: {summary}", errors=errors)

    return Event(
        id=str(identifier),
        title=str(title),
        start=start,
        end=end,
        all_day=all_day,
        recurring=recurring,
        recurrence_rule=rule if recurring else None,
        description=str(_pick(record, "description", default="")),
        location=_pick(record, "location"),
        organizer=organizer,
        attendees=attendees,
        categories=tuple(record["categories"]),
        status=status,
        reminders=reminders,
        conference_data=conference,
        color=_pick(record, "color"),
    )


def _check_bounds(event: Event, index: Optional[int]) -> None:
    if not event.all_day and event.start > event.end:
        raise ValidationError(
            f"Event {event.id} is invalid: start must not be after end",
            errors=[_error("end", "start must not be after end", index)],
        )


def _error(field_name: str, message: str, index: Optional[int]) -> Dict[str, Any]:
    error: Dict[str, Any] = {"field": field_name, "message": message}
    if index is not None:
        error["index"] = index
    return error
