from __future__ import annotations

from collections import Counter
from typing import Sequence

from slotforge.schemas.generator import OptimizationMetrics, ScoreWeights
from slotforge.schemas.timetable import WORKING_DAYS, Classroom, Faculty, WeeklySchedule


def room_utilization(
    schedule: WeeklySchedule,
    classrooms: Sequence[Classroom],
    slot_count: int,
    day_count: int = len(WORKING_DAYS),
) -> float:
    """Share of room-slots in the week that hold a session, in [0, 1]."""
    capacity = len(classrooms) * slot_count * day_count
    if capacity <= 0:
        return 0.0
    room_ids = {room.id for room in classrooms}
    used = sum(1 for session in schedule.sessions() if session.classroom_id in room_ids)
    return min(1.0, used / capacity)


def workload_balance(schedule: WeeklySchedule, faculty: Sequence[Faculty]) -> float:
    """``1 - variance / mean**2`` of per-faculty session counts, floored at 0.

    Returns 0 when there is no faculty or nobody teaches anything.
    """
    if not faculty:
        return 0.0
    counts = Counter(session.faculty_id for session in schedule.sessions())
    loads = [counts.get(member.id, 0) for member in faculty]
    mean = sum(loads) / len(loads)
    if mean == 0:
        return 0.0
    variance = sum((load - mean) ** 2 for load in loads) / len(loads)
    return max(0.0, 1.0 - variance / (mean * mean))


def daily_overload(schedule: WeeklySchedule, max_classes_per_day: int) -> int:
    return sum(max(0, len(schedule.for_day(day)) - max_classes_per_day) for day in WORKING_DAYS)


def calculate_metrics(
    schedule: WeeklySchedule,
    faculty: Sequence[Faculty],
    classrooms: Sequence[Classroom],
    slot_count: int,
    *,
    student_satisfaction: float = 0.85,
    time_slot_efficiency: float = 0.90,
) -> OptimizationMetrics:
    # Satisfaction and efficiency are estimates until preference and gap data exist.
    return OptimizationMetrics(
        utilization=room_utilization(schedule, classrooms, slot_count),
        balance=workload_balance(schedule, faculty),
        student_satisfaction=student_satisfaction,
        time_slot_efficiency=time_slot_efficiency,
    )


def overall_score(metrics: OptimizationMetrics, weights: ScoreWeights | None = None) -> float:
    weights = weights or ScoreWeights()
    score = 100.0 * (
        weights.utilization * metrics.utilization
        + weights.balance * metrics.balance
        + weights.student_satisfaction * metrics.student_satisfaction
        + weights.time_slot_efficiency * metrics.time_slot_efficiency
    )
    return max(0.0, min(100.0, score))
