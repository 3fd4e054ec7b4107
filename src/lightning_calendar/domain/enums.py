from __future__ import annotations

from enum import Enum


class EventStatus(str, Enum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class ResponseStatus(str, Enum):
    ACCEPTED = "accepted"
    TENTATIVE = "tentative"
    DECLINED = "declined"
    PENDING = "pending"


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class ConflictType(str, Enum):
    TIME = "Time"
    RESOURCE = "Resource"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ViewType(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    LIST = "list"


class DuplicatePolicy(str, Enum):
    REJECT = "reject"
    OVERWRITE = "overwrite"


class MissingPolicy(str, Enum):
    IGNORE = "ignore"
    RAISE = "raise"


class CachePolicy(str, Enum):
    LRU = "lru"
    FIFO = "fifo"
