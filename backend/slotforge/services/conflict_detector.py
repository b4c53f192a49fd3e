from __future__ import annotations

from collections import Counter, defaultdict
from typing import Sequence

from slotforge.schemas.conflict import Conflict
from slotforge.schemas.timetable import (
    WORKING_DAYS,
    Constraints,
    Faculty,
    ScheduledClass,
    Subject,
    WeeklySchedule,
)

FACULTY_CLASH_SUGGESTIONS = [
    "Assign another authorized faculty member",
    "Move one session to a different time slot",
]
CLASSROOM_CLASH_SUGGESTIONS = [
    "Use different classroom",
    "Move one session to a different time slot",
]


def same_faculty(first: ScheduledClass, second: ScheduledClass) -> bool:
    return first.faculty_id is not None and first.faculty_id == second.faculty_id


def sessions_clash(first: ScheduledClass, second: ScheduledClass) -> bool:
    """Two sessions clash when they share day and slot plus a faculty member or room."""
    if first.day != second.day or first.time_slot != second.time_slot:
        return False
    return same_faculty(first, second) or first.classroom_id == second.classroom_id


def clashes_with_any(session: ScheduledClass, day_sessions: Sequence[ScheduledClass]) -> bool:
    return any(sessions_clash(existing, session) for existing in day_sessions)


def detect_conflicts(schedule: WeeklySchedule) -> list[Conflict]:
    conflicts: list[Conflict] = []
    for day in WORKING_DAYS:
        day_sessions = schedule.for_day(day)
        count = len(day_sessions)
        for i in range(count):
            first = day_sessions[i]
            for j in range(i + 1, count):
                second = day_sessions[j]
                if first.time_slot != second.time_slot:
                    continue
                slot_label = first.time_slot.label
                if same_faculty(first, second):
                    conflicts.append(
                        Conflict(
                            type="faculty_clash",
                            description=(
                                f"Faculty {first.faculty_id} double-booked on {day.value} at {slot_label}: "
                                f"{first.subject_id} and {second.subject_id}"
                            ),
                            severity="critical",
                            suggestions=list(FACULTY_CLASH_SUGGESTIONS),
                        )
                    )
                if first.classroom_id == second.classroom_id:
                    conflicts.append(
                        Conflict(
                            type="classroom_clash",
                            description=(
                                f"Classroom {first.classroom_id} double-booked on {day.value} at {slot_label}: "
                                f"{first.subject_id} and {second.subject_id}"
                            ),
                            severity="high",
                            suggestions=list(CLASSROOM_CLASH_SUGGESTIONS),
                        )
                    )
    return conflicts


def count_clashes(schedule: WeeklySchedule) -> int:
    total = 0
    for day in WORKING_DAYS:
        day_sessions = schedule.for_day(day)
        for i, first in enumerate(day_sessions):
            for second in day_sessions[i + 1:]:
                if first.time_slot != second.time_slot:
                    continue
                total += same_faculty(first, second) + (first.classroom_id == second.classroom_id)
    return total


def detect_constraint_violations(
    schedule: WeeklySchedule,
    subjects: Sequence[Subject],
    faculty: Sequence[Faculty],
    constraints: Constraints,
) -> list[Conflict]:
    violations: list[Conflict] = []

    placed_by_subject = Counter(session.subject_id for session in schedule.sessions())
    for subject in subjects:
        required = subject.required_sessions
        placed = placed_by_subject.get(subject.id, 0)
        if placed < required:
            violations.append(
                Conflict(
                    type="constraint_violation",
                    description=(
                        f"Only {placed} of {required} weekly sessions placed for {subject.display_name}"
                    ),
                    severity="medium",
                    suggestions=[
                        "Authorize more faculty for this subject",
                        f"Add a {subject.preferred_classroom_type.value} with capacity "
                        f"{subject.min_classroom_capacity} or more",
                        "Relax faculty or classroom availability",
                    ],
                )
            )

    for day in WORKING_DAYS:
        load = len(schedule.for_day(day))
        if load > constraints.max_classes_per_day:
            violations.append(
                Conflict(
                    type="constraint_violation",
                    description=(
                        f"{load} classes scheduled on {day.value}, limit is {constraints.max_classes_per_day}"
                    ),
                    severity="medium",
                    suggestions=["Move sessions to a lighter day", "Raise the daily class limit"],
                )
            )

    hours_by_subject = {subject.id: subject.hours_per_class for subject in subjects}
    daily_load: dict[str, Counter] = defaultdict(Counter)
    weekly_hours: Counter = Counter()
    for session in schedule.sessions():
        if session.faculty_id is None:
            continue
        daily_load[session.faculty_id][session.day] += 1
        weekly_hours[session.faculty_id] += hours_by_subject.get(session.subject_id, 1)

    for member in faculty:
        for day in WORKING_DAYS:
            load = daily_load[member.id][day]
            if load > member.max_classes_per_day:
                violations.append(
                    Conflict(
                        type="constraint_violation",
                        description=(
                            f"Faculty {member.name or member.id} teaches {load} classes on {day.value}, "
                            f"limit is {member.max_classes_per_day}"
                        ),
                        severity="low",
                        suggestions=["Spread this faculty member's sessions across the week"],
                    )
                )
        hours = weekly_hours[member.id]
        if hours > member.max_hours_per_week:
            violations.append(
                Conflict(
                    type="constraint_violation",
                    description=(
                        f"Faculty {member.name or member.id} assigned {hours} hours per week, "
                        f"limit is {member.max_hours_per_week}"
                    ),
                    severity="low",
                    suggestions=["Reassign sessions to another authorized faculty member"],
                )
            )
    return violations
