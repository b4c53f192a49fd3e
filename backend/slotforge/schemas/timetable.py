from __future__ import annotations

import re
from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def _validate_time(value: str) -> str:
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


class Day(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"


WORKING_DAYS: tuple[Day, ...] = tuple(Day)


class ClassType(str, Enum):
    theory = "theory"
    practical = "practical"
    tutorial = "tutorial"
    project = "project"
    seminar = "seminar"


class RoomType(str, Enum):
    lecture_hall = "lecture_hall"
    laboratory = "laboratory"
    seminar_room = "seminar_room"
    auditorium = "auditorium"
    tutorial_room = "tutorial_room"


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"


class AvailabilityWindow(BaseModel):
    start_time: str
    end_time: str
    is_blocked: bool = False
    reason: str | None = Field(default=None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)


class DayAvailability(BaseModel):
    is_available: bool = True
    time_slots: list[AvailabilityWindow] = Field(default_factory=list)

    def blocked_windows(self) -> list[AvailabilityWindow]:
        return [window for window in self.time_slots if window.is_blocked]


class FixedSlot(BaseModel):
    day: Day
    start_time: str
    end_time: str
    classroom_id: str = Field(min_length=1)
    faculty_id: str | None = Field(default=None, min_length=1)
    reason: str | None = Field(default=None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)

    @property
    def time_slot(self) -> TimeSlot:
        return TimeSlot(start_time=self.start_time, end_time=self.end_time)


class Subject(BaseModel):
    id: str = Field(min_length=1)
    code: str = ""
    name: str = ""
    type: ClassType = ClassType.theory
    classes_per_week: int = Field(ge=0, le=40)
    hours_per_class: int = Field(default=1, ge=1, le=4)
    preferred_classroom_type: RoomType = RoomType.lecture_hall
    min_classroom_capacity: int = Field(default=30, ge=0)
    fixed_slots: list[FixedSlot] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    enrolled_students: int = Field(default=0, ge=0)
    department: str | None = None
    semester: int | None = Field(default=None, ge=1, le=20)
    is_elective: bool = False

    @property
    def display_name(self) -> str:
        return self.name or self.code or self.id

    @property
    def required_sessions(self) -> int:
        if self.fixed_slots:
            return len(self.fixed_slots)
        return self.classes_per_week


class Faculty(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    department: str | None = None
    subject_ids: list[str] = Field(default_factory=list)
    availability: dict[Day, DayAvailability] = Field(default_factory=dict)
    max_hours_per_week: int = Field(default=20, ge=1, le=80)
    max_classes_per_day: int = Field(default=4, ge=1, le=12)

    def can_teach(self, subject_id: str) -> bool:
        return subject_id in self.subject_ids


class Classroom(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    type: RoomType
    capacity: int = Field(ge=0)
    availability: dict[Day, DayAvailability] = Field(default_factory=dict)


class ScheduledClass(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: Day
    time_slot: TimeSlot
    subject_id: str
    faculty_id: str | None = None
    classroom_id: str
    class_type: ClassType = ClassType.theory
    is_fixed: bool = False


def _empty_days() -> dict[Day, list[ScheduledClass]]:
    return {day: [] for day in WORKING_DAYS}


class WeeklySchedule(BaseModel):
    days: dict[Day, list[ScheduledClass]] = Field(default_factory=_empty_days)

    @field_validator("days")
    @classmethod
    def fill_missing_days(cls, value: dict[Day, list[ScheduledClass]]) -> dict[Day, list[ScheduledClass]]:
        return {day: list(value.get(day, [])) for day in WORKING_DAYS}

    @classmethod
    def empty(cls) -> WeeklySchedule:
        return cls()

    def clone(self) -> WeeklySchedule:
        # Sessions are frozen, so copying the per-day lists is a full value copy.
        return WeeklySchedule.model_construct(days={day: list(self.days[day]) for day in WORKING_DAYS})

    def for_day(self, day: Day) -> list[ScheduledClass]:
        return self.days[day]

    def add(self, session: ScheduledClass) -> None:
        self.days[session.day].append(session)

    def sessions(self) -> Iterator[ScheduledClass]:
        for day in WORKING_DAYS:
            yield from self.days[day]

    def session_count(self) -> int:
        return sum(len(self.days[day]) for day in WORKING_DAYS)

    def sessions_for_subject(self, subject_id: str) -> list[ScheduledClass]:
        return [session for session in self.sessions() if session.subject_id == subject_id]


class LunchBreak(BaseModel):
    start_time: str = "13:00"
    duration: int = Field(default=60, ge=0, le=240)

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)


class Constraints(BaseModel):
    max_classes_per_day: int = Field(default=6, ge=1, le=24)
    start_time: str = "09:00"
    end_time: str = "17:00"
    lunch_break: LunchBreak = Field(default_factory=LunchBreak)
    class_duration: int = Field(default=60, ge=5, le=240)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)
