from __future__ import annotations

from typing import Sequence

from slotforge.schemas.timetable import (
    Classroom,
    Day,
    DayAvailability,
    Faculty,
    Subject,
    TimeSlot,
    parse_time_to_minutes,
)

OPEN_DAY = DayAvailability()


def is_free(availability: dict[Day, DayAvailability], day: Day, time_slot: TimeSlot) -> bool:
    """Return whether an entity with ``availability`` can take ``time_slot`` on ``day``.

    Days missing from the mapping are open. A blocked window only rules out
    slots that *start* inside it (``blocked_start <= slot_start < blocked_end``).
    """
    entry = availability.get(day, OPEN_DAY)
    if not entry.is_available:
        return False
    slot_start = time_slot.start_minutes
    for window in entry.blocked_windows():
        if parse_time_to_minutes(window.start_time) <= slot_start < parse_time_to_minutes(window.end_time):
            return False
    return True


def authorized_faculty(subject: Subject, faculty: Sequence[Faculty]) -> list[Faculty]:
    return [member for member in faculty if member.can_teach(subject.id)]


def matching_classrooms(subject: Subject, classrooms: Sequence[Classroom]) -> list[Classroom]:
    return [
        room
        for room in classrooms
        if room.type == subject.preferred_classroom_type and room.capacity >= subject.min_classroom_capacity
    ]


def find_suitable_faculty(
    subject: Subject,
    faculty: Sequence[Faculty],
    day: Day,
    time_slot: TimeSlot,
) -> Faculty | None:
    for member in faculty:
        if member.can_teach(subject.id) and is_free(member.availability, day, time_slot):
            return member
    return None


def find_suitable_classroom(
    subject: Subject,
    classrooms: Sequence[Classroom],
    day: Day,
    time_slot: TimeSlot,
) -> Classroom | None:
    for room in matching_classrooms(subject, classrooms):
        if is_free(room.availability, day, time_slot):
            return room
    return None
