from __future__ import annotations

from slotforge.schemas.timetable import Constraints, TimeSlot, parse_time_to_minutes

__all__ = ["build_slot_catalog", "minutes_to_time", "parse_time_to_minutes"]


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def lunch_window(constraints: Constraints) -> tuple[int, int] | None:
    duration = constraints.lunch_break.duration
    if duration <= 0:
        return None
    start = parse_time_to_minutes(constraints.lunch_break.start_time)
    return start, start + duration


def build_slot_catalog(constraints: Constraints) -> list[TimeSlot]:
    """Cut the working day into ``class_duration`` slots around the lunch break.

    An inverted day window or a lunch break covering the whole day simply
    produces an empty catalog.
    """
    day_start = parse_time_to_minutes(constraints.start_time)
    day_end = parse_time_to_minutes(constraints.end_time)
    period = constraints.class_duration
    lunch = lunch_window(constraints)

    slots: list[TimeSlot] = []
    cursor = day_start
    while cursor + period <= day_end and cursor + period < 24 * 60:
        end = cursor + period
        if lunch is not None and cursor < lunch[1] and end > lunch[0]:
            # Jump to lunch end rather than scanning through the break.
            cursor = max(cursor + 1, lunch[1])
            continue
        slots.append(TimeSlot(start_time=minutes_to_time(cursor), end_time=minutes_to_time(end)))
        cursor = end
    return slots
