from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain import Attendee, ConferenceData, Conflict, ConflictReport, Event, Organizer, Reminder, build_event


class _HostModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class OrganizerPayload(_HostModel):
    name: str
    email: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, organizer: Organizer) -> "OrganizerPayload":
        return cls(name=organizer.name, email=organizer.email)


class AttendeePayload(_HostModel):
    name: str
    email: Optional[str] = Field(default=None)
    response_status: str = Field(default="pending")
    resource: bool = Field(default=False)

    @classmethod
    def from_domain(cls, attendee: Attendee) -> "AttendeePayload":
        return cls(
            name=attendee.name,
            email=attendee.email,
            response_status=attendee.response_status.value,
            resource=attendee.resource,
        )


class ReminderPayload(_HostModel):
    method: str
    minutes_before: int

    @classmethod
    def from_domain(cls, reminder: Reminder) -> "ReminderPayload":
        return cls(method=reminder.method, minutes_before=reminder.minutes_before)


class ConferencePayload(_HostModel):
    provider: Optional[str] = Field(default=None)
    url: Optional[str] = Field(default=None)
    access_code: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, conference: ConferenceData) -> "ConferencePayload":
        return cls(
            provider=conference.provider,
            url=conference.url,
            access_code=conference.access_code,
            password=conference.password,
        )


class EventPayload(_HostModel):
    id: str
    title: str
    start: datetime
    end: Optional[datetime] = Field(default=None)
    all_day: bool = Field(default=False)
    recurring: Optional[bool] = Field(default=None)
    recurrence_rule: Optional[Union[str, Dict[str, Any]]] = Field(default=None)
    description: str = Field(default="")
    location: Optional[str] = Field(default=None)
    organizer: Optional[OrganizerPayload] = Field(default=None)
    attendees: List[AttendeePayload] = Field(default_factory=list)
    category: Optional[str] = Field(default=None)
    categories: List[str] = Field(default_factory=list)
    status: str = Field(default="confirmed")
    reminders: List[ReminderPayload] = Field(default_factory=list)
    conference_data: Optional[ConferencePayload] = Field(default=None)
    color: Optional[str] = Field(default=None)
    series_id: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: Event) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            start=event.start,
            end=event.end,
            all_day=event.all_day,
            recurring=event.recurring,
            recurrence_rule=event.recurrence_rule.to_rrule_string() if event.recurrence_rule else None,
            description=event.description,
            location=event.location,
            organizer=OrganizerPayload.from_domain(event.organizer) if event.organizer else None,
            attendees=[AttendeePayload.from_domain(attendee) for attendee in event.attendees],
            category=event.category,
            categories=list(event.categories),
            status=event.status.value,
            reminders=[ReminderPayload.from_domain(reminder) for reminder in event.reminders],
            conference_data=ConferencePayload.from_domain(event.conference_data) if event.conference_data else None,
            color=event.color,
            series_id=event.series_id,
        )

    def to_domain(self) -> Event:
        return build_event(self.model_dump(exclude={"series_id"}, exclude_none=True))


class ConflictPayload(_HostModel):
    type: str
    description: str
    severity: str
    event_id: str
    event_title: str
    overlap_start: datetime
    overlap_end: datetime
    resources: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, conflict: Conflict) -> "ConflictPayload":
        return cls(
            type=conflict.type.value,
            description=conflict.description,
            severity=conflict.severity.value,
            event_id=conflict.event_id,
            event_title=conflict.event_title,
            overlap_start=conflict.overlap_start,
            overlap_end=conflict.overlap_end,
            resources=list(conflict.resources),
        )


class ConflictReportPayload(_HostModel):
    event_id: str
    has_conflicts: bool
    total_conflicts: int
    conflicts: List[ConflictPayload] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, report: ConflictReport) -> "ConflictReportPayload":
        return cls(
            event_id=report.event_id,
            has_conflicts=report.has_conflicts,
            total_conflicts=report.total_conflicts,
            conflicts=[ConflictPayload.from_domain(conflict) for conflict in report.conflicts],
        )
