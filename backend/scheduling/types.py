from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import time
from enum import Enum, IntEnum


class DayOfWeek(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, value: "DayOfWeek | int | str") -> "DayOfWeek":
        """Accept a member, its integer value, or a case-insensitive name ("mon", "Monday")."""

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid day of week: {value!r}")
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().upper()
        if text.isdigit():
            return cls(int(text))
        for member in cls:
            if member.name == text or (len(text) >= 3 and member.name.startswith(text)):
                return member
        raise ValueError(f"Invalid day of week: {value!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()


WEEKDAYS: tuple[DayOfWeek, ...] = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
)


class DistributionPolicy(str, Enum):
    ROUND_ROBIN = "ROUND_ROBIN"
    QUOTA_WEIGHTED = "QUOTA_WEIGHTED"


@dataclass(frozen=True)
class SectionInfo:
    id: uuid.UUID
    room_number: str | None
    code: str | None = None


@dataclass(frozen=True)
class SectionSubjectAssignment:
    subject_id: uuid.UUID
    subject_name: str
    teacher_id: uuid.UUID
    teacher_name: str = ""
    weekly_periods: int = 0
    is_mandatory: bool = True


@dataclass(frozen=True)
class GenerationOptions:
    working_days: tuple[DayOfWeek, ...] = field(default=WEEKDAYS)
    periods_per_day: int = 8
    period_duration: int = 45
    break_after_period: int = 4
    break_duration: int = 30
    school_start_time: time = time(8, 0)
    policy: DistributionPolicy = DistributionPolicy.ROUND_ROBIN
