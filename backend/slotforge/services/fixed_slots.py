from __future__ import annotations

import logging
from typing import Sequence

from slotforge.schemas.conflict import Conflict
from slotforge.schemas.timetable import ScheduledClass, Subject, WeeklySchedule

logger = logging.getLogger(__name__)

FIXED_SLOT_CLASH_SUGGESTIONS = ["Consider changing fixed time slot", "Use different classroom"]


def place_fixed_slots(
    schedule: WeeklySchedule,
    subjects: Sequence[Subject],
    conflicts: list[Conflict],
) -> int:
    """Pin every declared fixed slot into ``schedule`` in input order.

    A slot whose (day, time, classroom) is already taken is skipped and
    reported as a ``classroom_clash``. Returns how many sessions were placed.
    """
    placed = 0
    for subject in subjects:
        for fixed in subject.fixed_slots:
            time_slot = fixed.time_slot
            day_sessions = schedule.for_day(fixed.day)
            taken = any(
                existing.time_slot == time_slot and existing.classroom_id == fixed.classroom_id
                for existing in day_sessions
            )
            if taken:
                logger.warning(
                    "Fixed slot clash subject=%s day=%s slot=%s classroom=%s",
                    subject.id,
                    fixed.day.value,
                    time_slot.label,
                    fixed.classroom_id,
                )
                conflicts.append(
                    Conflict(
                        type="classroom_clash",
                        description=(
                            f"Fixed time slot conflict for {subject.display_name} "
                            f"on {fixed.day.value} at {time_slot.label}"
                        ),
                        severity="high",
                        suggestions=list(FIXED_SLOT_CLASH_SUGGESTIONS),
                    )
                )
                continue
            schedule.add(
                ScheduledClass(
                    day=fixed.day,
                    time_slot=time_slot,
                    subject_id=subject.id,
                    faculty_id=fixed.faculty_id,
                    classroom_id=fixed.classroom_id,
                    class_type=subject.type,
                    is_fixed=True,
                )
            )
            placed += 1
    return placed
