from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from .enums import ConflictType, EventStatus, Frequency, ResponseStatus, Severity

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:  # noqa: BLE001
            raise ValueError(f"Unsupported datetime value: {value!r}") from exc
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _parse_until(value: str) -> datetime:
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1]
    for pattern in ("%Y%m%dT%H%M%S", "%Y%m%d"):
        try:
            return datetime.strptime(raw, pattern)
        except ValueError:
            continue
    return parse_datetime(value)


@dataclass(frozen=True, slots=True)
class Organizer:
    name: str
    email: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> "Organizer":
        if isinstance(record, Organizer):
            return record
        if isinstance(record, str):
            return cls(name=record)
        return cls(name=str(_pick(record, "name", default="")), email=_pick(record, "email", "contact"))

    def to_record(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True, slots=True)
class Attendee:
    name: str
    email: Optional[str] = None
    response_status: ResponseStatus = ResponseStatus.PENDING
    resource: bool = False

    @classmethod
    def from_record(cls, record: Any) -> "Attendee":
        if isinstance(record, Attendee):
            return record
        if isinstance(record, str):
            return cls(name=record)
        status = _pick(record, "response_status", "responseStatus", default=ResponseStatus.PENDING)
        return cls(
            name=str(_pick(record, "name", default="")),
            email=_pick(record, "email", "contact"),
            response_status=ResponseStatus(status),
            resource=bool(_pick(record, "resource", default=False)),
        )

    @property
    def identity(self) -> str:
        return (self.email or self.name).strip().lower()

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "response_status": self.response_status.value,
            "resource": self.resource,
        }


@dataclass(frozen=True, slots=True)
class Reminder:
    method: str
    minutes_before: int

    @classmethod
    def from_record(cls, record: Any) -> "Reminder":
        if isinstance(record, Reminder):
            return record
        minutes = int(_pick(record, "minutes_before", "minutesBefore", default=0))
        if minutes < 0:
            raise ValueError("minutes_before must not be negative")
        return cls(method=str(_pick(record, "method", default="popup")), minutes_before=minutes)

    def to_record(self) -> Dict[str, Any]:
        return {"method": self.method, "minutes_before": self.minutes_before}


@dataclass(frozen=True, slots=True)
class ConferenceData:
    provider: Optional[str] = None
    url: Optional[str] = None
    access_code: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> "ConferenceData":
        if isinstance(record, ConferenceData):
            return record
        return cls(
            provider=_pick(record, "provider", "solution"),
            url=_pick(record, "url", "join_url", "joinUrl"),
            access_code=_pick(record, "access_code", "accessCode"),
            password=_pick(record, "password"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "url": self.url,
            "access_code": self.access_code,
            "password": self.password,
        }


@dataclass(frozen=True, slots=True)
class RecurrenceRule:
    """A subset of RFC 5545 RRULE: frequency, weekday filter, interval and bounds."""

    frequency: Frequency
    by_day: Tuple[str, ...] = ()
    interval: int = 1
    count: Optional[int] = None
    until: Optional[datetime] = None

    def __post_init__(self) -> None:
        unknown = [code for code in self.by_day if code not in WEEKDAY_CODES]
        if unknown:
            raise ValueError(f"Unknown weekday codes: {', '.join(unknown)}")
        if self.interval < 1:
            raise ValueError("interval must be at least 1")
        if self.count is not None and self.count < 1:
            raise ValueError("count must be at least 1")

    @classmethod
    def from_value(cls, value: Any) -> "RecurrenceRule":
        if isinstance(value, RecurrenceRule):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, Mapping):
            return cls.from_record(value)
        raise ValueError(f"Unsupported recurrence rule: {value!r}")

    @classmethod
    def from_string(cls, text: str) -> "RecurrenceRule":
        normalized = text.strip().removeprefix("RRULE:")
        components: Dict[str, str] = {}
        for part in normalized.split(";"):
            if "=" not in part:
                continue
            key, value = part.split("=", 1)
            components[key.strip().upper()] = value.strip()
        if "FREQ" not in components:
            raise ValueError("recurrence rule must include FREQ")
        return cls(
            frequency=Frequency(components["FREQ"].upper()),
            by_day=_weekday_codes(components.get("BYDAY", "")),
            interval=int(components.get("INTERVAL", 1)),
            count=int(components["COUNT"]) if "COUNT" in components else None,
            until=_parse_until(components["UNTIL"]) if "UNTIL" in components else None,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "RecurrenceRule":
        freq = _pick(record, "frequency", "freq")
        if not freq:
            raise ValueError("recurrence rule must include freq")
        count = _pick(record, "count")
        until = _pick(record, "until")
        return cls(
            frequency=Frequency(str(freq).upper()),
            by_day=_weekday_codes(_pick(record, "by_day", "byDay", default=())),
            interval=int(_pick(record, "interval", default=1)),
            count=int(count) if count is not None else None,
            until=parse_datetime(until) if until is not None else None,
        )

    def to_rrule_string(self) -> str:
        parts = [f"FREQ={self.frequency.value}"]
        if self.interval != 1:
            parts.append(f"INTERVAL={self.interval}")
        if self.by_day:
            parts.append(f"BYDAY={','.join(self.by_day)}")
        if self.count is not None:
            parts.append(f"COUNT={self.count}")
        if self.until is not None:
            parts.append(f"UNTIL={self.until.strftime('%Y%m%dT%H%M%S')}")
        return ";".join(parts)

    def to_record(self) -> Dict[str, Any]:
        return {
            "freq": self.frequency.value,
            "by_day": list(self.by_day),
            "interval": self.interval,
            "count": self.count,
            "until": self.until.isoformat() if self.until else None,
        }


def _weekday_codes(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = [item for item in value.split(",") if item.strip()]
    else:
        items = list(value or ())
    return tuple(str(item).strip().upper()[:2] for item in items)


@dataclass(frozen=True, slots=True)
class Event:
    """Canonical scheduling unit. Instances are immutable; the store replaces them on update."""

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    recurring: bool = False
    recurrence_rule: Optional[RecurrenceRule] = None
    description: str = ""
    location: Optional[str] = None
    organizer: Optional[Organizer] = None
    attendees: Tuple[Attendee, ...] = ()
    categories: Tuple[str, ...] = ()
    status: EventStatus = EventStatus.CONFIRMED
    reminders: Tuple[Reminder, ...] = ()
    conference_data: Optional[ConferenceData] = None
    color: Optional[str] = None
    series_id: Optional[str] = None

    @property
    def category(self) -> Optional[str]:
        return self.categories[0] if self.categories else None

    @property
    def is_occurrence(self) -> bool:
        return self.series_id is not None

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def span(self) -> Tuple[datetime, datetime]:
        """Occupied interval; all-day events cover whole days."""

        if self.all_day:
            first = datetime.combine(self.start.date(), time.min, tzinfo=self.start.tzinfo)
            last = datetime.combine(self.end.date(), time.min, tzinfo=self.start.tzinfo)
            return first, last + timedelta(days=1)
        return self.start, self.end

    @property
    def resources(self) -> Tuple[Attendee, ...]:
        return tuple(
            attendee
            for attendee in self.attendees
            if attendee.resource and attendee.response_status != ResponseStatus.DECLINED
        )

    def overlaps_window(self, window_start: datetime, window_end: datetime) -> bool:
        """True when the event intersects the closed window ``[window_start, window_end]``."""

        start, end = self.span
        if start > window_end:
            return False
        if end > start:
            return end > window_start
        return start >= window_start

    def occurrence_at(self, occurrence_start: datetime) -> "Event":
        series = self.series_id or self.id
        return replace(
            self,
            id=f"{series}_{occurrence_start.strftime('%Y%m%dT%H%M%S')}",
            start=occurrence_start,
            end=occurrence_start + self.duration,
            series_id=series,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "all_day": self.all_day,
            "recurring": self.recurring,
            "recurrence_rule": self.recurrence_rule.to_rrule_string() if self.recurrence_rule else None,
            "description": self.description,
            "location": self.location,
            "organizer": self.organizer.to_record() if self.organizer else None,
            "attendees": [attendee.to_record() for attendee in self.attendees],
            "categories": list(self.categories),
            "status": self.status.value,
            "reminders": [reminder.to_record() for reminder in self.reminders],
            "conference_data": self.conference_data.to_record() if self.conference_data else None,
            "color": self.color,
        }


@dataclass(frozen=True, slots=True)
class Conflict:
    type: ConflictType
    description: str
    severity: Severity
    event_id: str
    event_title: str
    overlap_start: datetime
    overlap_end: datetime
    resources: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
            "event_id": self.event_id,
            "event_title": self.event_title,
            "overlap_start": self.overlap_start.isoformat(),
            "overlap_end": self.overlap_end.isoformat(),
            "resources": list(self.resources),
        }


@dataclass(frozen=True, slots=True)
class ConflictReport:
    event_id: str
    conflicts: Tuple[Conflict, ...] = field(default_factory=tuple)

    @property
    def total_conflicts(self) -> int:
        return len(self.conflicts)

    @property
    def has_conflicts(self) -> bool:
        return self.total_conflicts > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "has_conflicts": self.has_conflicts,
            "total_conflicts": self.total_conflicts,
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
        }
