from __future__ import annotations

import logging
import random
from typing import Sequence

from slotforge.schemas.timetable import (
    Classroom,
    Day,
    Faculty,
    ScheduledClass,
    Subject,
    TimeSlot,
    WeeklySchedule,
)
from slotforge.services.availability import (
    authorized_faculty,
    find_suitable_classroom,
    find_suitable_faculty,
    matching_classrooms,
)
from slotforge.services.conflict_detector import clashes_with_any

logger = logging.getLogger(__name__)


class CandidateGenerator:
    """Builds random, mostly clash-free weekly schedules for the initial population."""

    def __init__(
        self,
        *,
        subjects: Sequence[Subject],
        faculty: Sequence[Faculty],
        classrooms: Sequence[Classroom],
        days: Sequence[Day],
        slots: Sequence[TimeSlot],
        rng: random.Random,
    ) -> None:
        self.faculty = list(faculty)
        self.classrooms = list(classrooms)
        self.days = list(days)
        self.slots = list(slots)
        self.random = rng
        self.subjects: list[Subject] = []

        for subject in subjects:
            if subject.fixed_slots or subject.classes_per_week <= 0:
                continue
            if not authorized_faculty(subject, self.faculty):
                logger.warning("No faculty authorized for subject=%s; it will not be placed", subject.id)
                continue
            if not matching_classrooms(subject, self.classrooms):
                logger.warning(
                    "No %s with capacity >= %s for subject=%s; it will not be placed",
                    subject.preferred_classroom_type.value,
                    subject.min_classroom_capacity,
                    subject.id,
                )
                continue
            self.subjects.append(subject)

    @property
    def pass_size(self) -> int:
        return len(self.days) * len(self.slots)

    def attempt_budget(self, subject: Subject) -> int:
        return subject.classes_per_week * self.pass_size

    def generate(self, base: WeeklySchedule) -> WeeklySchedule:
        schedule = base.clone()
        if self.pass_size == 0:
            return schedule
        for subject in self.subjects:
            placed = self._place_subject(schedule, subject)
            if placed < subject.classes_per_week:
                logger.debug(
                    "Placed %s/%s sessions for subject=%s",
                    placed,
                    subject.classes_per_week,
                    subject.id,
                )
        return schedule

    def _place_subject(self, schedule: WeeklySchedule, subject: Subject) -> int:
        required = subject.classes_per_week
        budget = self.attempt_budget(subject)
        placed = 0
        attempts = 0
        while placed < required and attempts < budget:
            attempts += 1
            day = self.random.choice(self.days)
            time_slot = self.random.choice(self.slots)

            member = find_suitable_faculty(subject, self.faculty, day, time_slot)
            room = find_suitable_classroom(subject, self.classrooms, day, time_slot)
            if member is not None and room is not None:
                session = ScheduledClass(
                    day=day,
                    time_slot=time_slot,
                    subject_id=subject.id,
                    faculty_id=member.id,
                    classroom_id=room.id,
                    class_type=subject.type,
                )
                if not clashes_with_any(session, schedule.for_day(day)):
                    schedule.add(session)
                    placed += 1

            if placed == 0 and attempts >= self.pass_size:
                # A whole pass over the catalog's worth of draws found nothing.
                break
        return placed
