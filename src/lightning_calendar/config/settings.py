from __future__ import annotations

import calendar
import os
from dataclasses import dataclass
from datetime import time, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, Type, TypeVar, Union

from dotenv import load_dotenv

from ..domain.enums import CachePolicy, DuplicatePolicy, MissingPolicy, ViewType

load_dotenv()

E = TypeVar("E", bound=Enum)

_WEEKDAY_NAMES = {name.lower(): index for index, name in enumerate(calendar.day_name)}
_WEEKDAY_NAMES.update({abbr.lower(): index for index, abbr in enumerate(calendar.day_abbr)})


def parse_weekday(value: Union[int, str]) -> int:
    """Weekday index using the :mod:`calendar` convention (Monday is 0, Sunday is 6)."""

    if isinstance(value, int):
        if not 0 <= value <= 6:
            raise ValueError("weekday must be between 0 (Monday) and 6 (Sunday)")
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return parse_weekday(int(text))
    if text not in _WEEKDAY_NAMES:
        raise ValueError(f"Unknown weekday: {value!r}")
    return _WEEKDAY_NAMES[text]


def parse_clock_time(value: Union[time, str]) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError as exc:  # noqa: BLE001
        raise ValueError("time must be formatted HH:MM") from exc


@dataclass(frozen=True)
class BusinessHours:
    start: time = time(hour=9)
    end: time = time(hour=17)

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("business hours must end after they start")

    @classmethod
    def from_value(cls, value: Any) -> "BusinessHours":
        if isinstance(value, BusinessHours):
            return value
        if isinstance(value, Mapping):
            return cls(start=parse_clock_time(value["start"]), end=parse_clock_time(value["end"]))
        raise ValueError(f"Unsupported business hours: {value!r}")

    @property
    def hours(self) -> range:
        last = self.end.hour if self.end.minute == 0 and self.end.second == 0 else self.end.hour + 1
        return range(self.start.hour, last)

    def to_dict(self) -> dict:
        return {"start": self.start.strftime("%H:%M"), "end": self.end.strftime("%H:%M")}


@dataclass(frozen=True)
class CacheSettings:
    capacity: int
    policy: CachePolicy


@dataclass(frozen=True)
class StoreSettings:
    duplicate_policy: DuplicatePolicy
    missing_policy: MissingPolicy


@dataclass(frozen=True)
class CalendarSettings:
    default_view: ViewType
    week_starts_on: int
    business_hours: BusinessHours
    list_days: int
    list_step: ViewType
    day_view_business_hours_only: bool


@dataclass(frozen=True)
class ConflictSettings:
    horizon: timedelta


@dataclass(frozen=True)
class LoggingSettings:
    level: str


@dataclass(frozen=True)
class AppSettings:
    cache: CacheSettings
    store: StoreSettings
    calendar: CalendarSettings
    conflicts: ConflictSettings
    logging: LoggingSettings


def _int_from_env(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _timedelta_from_env(name: str, default_days: int) -> timedelta:
    raw = os.getenv(name)
    if not raw:
        return timedelta(days=default_days)
    try:
        days = float(raw)
    except ValueError:
        return timedelta(days=default_days)
    return timedelta(days=days)


def _enum_from_env(name: str, enum_type: Type[E], default: E) -> E:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return enum_type(raw.strip().lower())
    except ValueError:
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _business_hours_from_env() -> BusinessHours:
    try:
        return BusinessHours(
            start=parse_clock_time(os.getenv("LIGHTNING_BUSINESS_HOURS_START", "09:00")),
            end=parse_clock_time(os.getenv("LIGHTNING_BUSINESS_HOURS_END", "17:00")),
        )
    except ValueError:
        return BusinessHours()


def _weekday_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return parse_weekday(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    cache = CacheSettings(
        capacity=_int_from_env("LIGHTNING_CACHE_CAPACITY", 128),
        policy=_enum_from_env("LIGHTNING_CACHE_POLICY", CachePolicy, CachePolicy.LRU),
    )

    store = StoreSettings(
        duplicate_policy=_enum_from_env("LIGHTNING_DUPLICATE_POLICY", DuplicatePolicy, DuplicatePolicy.REJECT),
        missing_policy=_enum_from_env("LIGHTNING_MISSING_POLICY", MissingPolicy, MissingPolicy.IGNORE),
    )

    calendar_settings = CalendarSettings(
        default_view=_enum_from_env("LIGHTNING_DEFAULT_VIEW", ViewType, ViewType.MONTH),
        week_starts_on=_weekday_from_env("LIGHTNING_WEEK_STARTS_ON", calendar.SUNDAY),
        business_hours=_business_hours_from_env(),
        list_days=_int_from_env("LIGHTNING_LIST_DAYS", 30),
        list_step=_enum_from_env("LIGHTNING_LIST_STEP", ViewType, ViewType.WEEK),
        day_view_business_hours_only=_bool_from_env("LIGHTNING_DAY_VIEW_BUSINESS_HOURS_ONLY", False),
    )

    conflicts = ConflictSettings(horizon=_timedelta_from_env("LIGHTNING_CONFLICT_HORIZON_DAYS", 30))

    logging_settings = LoggingSettings(level=os.getenv("LIGHTNING_LOG_LEVEL", "INFO").upper())

    return AppSettings(
        cache=cache,
        store=store,
        calendar=calendar_settings,
        conflicts=conflicts,
        logging=logging_settings,
    )
