from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, YEARLY, rrule

from .enums import Frequency
from .models import Event, RecurrenceRule

_FREQUENCIES = {
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
    Frequency.YEARLY: YEARLY,
}
_WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}


def build_rrule(rule: RecurrenceRule, dtstart: datetime) -> rrule:
    until = rule.until
    if until is not None and (until.tzinfo is None) != (dtstart.tzinfo is None):
        until = until.replace(tzinfo=dtstart.tzinfo)
    return rrule(
        _FREQUENCIES[rule.frequency],
        dtstart=dtstart,
        interval=rule.interval,
        count=rule.count,
        until=until,
        byweekday=[_WEEKDAYS[code] for code in rule.by_day] or None,
    )


def occurrence_starts(rule: RecurrenceRule, dtstart: datetime, window_start: datetime, window_end: datetime) -> List[datetime]:
    """Occurrence start instants of ``rule`` between the two bounds, inclusive."""

    if window_end < window_start:
        return []
    return build_rrule(rule, dtstart).between(window_start, window_end, inc=True)


def expand_occurrences(event: Event, window_start: datetime, window_end: datetime) -> List[Event]:
    """Occurrences of a recurring ``event`` whose span intersects ``[window_start, window_end]``.

    Pure: the stored template is never modified and nothing is cached here.
    Non-recurring events come back unchanged when they intersect the window.
    """

    if not event.recurring or event.recurrence_rule is None:
        return [event] if event.overlaps_window(window_start, window_end) else []

    template_start, template_end = event.span
    lookback = template_end - template_start
    starts = occurrence_starts(event.recurrence_rule, event.start, window_start - lookback, window_end)
    occurrences = [event.occurrence_at(start) for start in starts]
    return [occurrence for occurrence in occurrences if occurrence.overlaps_window(window_start, window_end)]


def series_end(event: Event) -> Optional[datetime]:
    """Last instant a recurring series can occupy, or ``None`` when unbounded."""

    rule = event.recurrence_rule
    if rule is None:
        return event.span[1]
    duration = event.span[1] - event.span[0]
    if rule.count is not None:
        last = None
        for last in build_rrule(rule, event.start):
            pass
        return (last or event.start) + duration
    if rule.until is not None:
        until = rule.until
        if (until.tzinfo is None) != (event.start.tzinfo is None):
            until = until.replace(tzinfo=event.start.tzinfo)
        return until + duration
    return None
