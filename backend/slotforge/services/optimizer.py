from __future__ import annotations

import logging
import random
from time import perf_counter
from typing import Sequence

from slotforge.core.config import get_settings
from slotforge.core.exceptions import SchedulerError
from slotforge.schemas.conflict import Conflict
from slotforge.schemas.generator import GeneratedOption, GenerationSettings, OptimizationResult
from slotforge.schemas.timetable import (
    WORKING_DAYS,
    Classroom,
    Constraints,
    Faculty,
    Subject,
    WeeklySchedule,
)
from slotforge.services.candidate_generator import CandidateGenerator
from slotforge.services.conflict_detector import detect_conflicts, detect_constraint_violations
from slotforge.services.fixed_slots import place_fixed_slots
from slotforge.services.genetic_search import FitnessContext, GeneticSearch
from slotforge.services.metrics import calculate_metrics, overall_score
from slotforge.services.time_slots import build_slot_catalog

logger = logging.getLogger(__name__)


class TimetableOptimizer:
    """Entry point: fixed-slot seeding, genetic search, then scoring.

    All randomness flows through one ``random.Random``; pass ``rng`` or set
    ``random_seed`` for repeatable runs.
    """

    def __init__(
        self,
        settings: GenerationSettings | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or GenerationSettings.from_settings(get_settings())
        self.random = rng or random.Random(self.settings.random_seed)

    def optimize(
        self,
        constraints: Constraints | None,
        subjects: Sequence[Subject],
        faculty: Sequence[Faculty],
        classrooms: Sequence[Classroom],
    ) -> OptimizationResult:
        constraints = constraints or Constraints()
        logger.info(
            "Timetable run subjects=%s faculty=%s classrooms=%s population=%s generations=%s",
            len(subjects),
            len(faculty),
            len(classrooms),
            self.settings.population_size,
            self.settings.generations,
        )
        try:
            return self._optimize(constraints, subjects, faculty, classrooms)
        except Exception as exc:
            logger.exception("Timetable optimization failed")
            raise SchedulerError(
                "Failed to generate optimized timetable",
                details={"error": str(exc)},
            ) from exc

    def _optimize(
        self,
        constraints: Constraints,
        subjects: Sequence[Subject],
        faculty: Sequence[Faculty],
        classrooms: Sequence[Classroom],
    ) -> OptimizationResult:
        start = perf_counter()
        slots = build_slot_catalog(constraints)
        if not slots:
            logger.warning(
                "Constraints %s-%s leave no %s-minute slots; only fixed slots can be placed",
                constraints.start_time,
                constraints.end_time,
                constraints.class_duration,
            )

        conflicts: list[Conflict] = []
        base = WeeklySchedule.empty()
        place_fixed_slots(base, subjects, conflicts)

        generator = CandidateGenerator(
            subjects=subjects,
            faculty=faculty,
            classrooms=classrooms,
            days=WORKING_DAYS,
            slots=slots,
            rng=self.random,
        )
        context = FitnessContext.build(
            subjects=subjects,
            faculty=faculty,
            classrooms=classrooms,
            slots=slots,
            max_classes_per_day=constraints.max_classes_per_day,
        )
        search = GeneticSearch(generator=generator, context=context, settings=self.settings, rng=self.random)
        outcome = search.run(base)
        schedule = outcome.best

        metrics = calculate_metrics(
            schedule,
            faculty,
            classrooms,
            len(slots),
            student_satisfaction=self.settings.student_satisfaction_estimate,
            time_slot_efficiency=self.settings.time_slot_efficiency_estimate,
        )
        score = overall_score(metrics, self.settings.score_weights)

        conflicts.extend(detect_conflicts(schedule))
        if self.settings.report_constraint_violations:
            conflicts.extend(detect_constraint_violations(schedule, subjects, faculty, constraints))

        runtime_ms = int((perf_counter() - start) * 1000)
        logger.info(
            "Timetable run finished sessions=%s score=%.2f fitness=%.2f conflicts=%s generations=%s runtime_ms=%s",
            schedule.session_count(),
            score,
            outcome.fitness,
            len(conflicts),
            outcome.generations_run,
            runtime_ms,
        )
        return OptimizationResult(
            schedule=schedule,
            score=score,
            metrics=metrics,
            conflicts=conflicts,
            fitness=outcome.fitness,
            generations_run=outcome.generations_run,
            runtime_ms=runtime_ms,
        )

    def generate_options(
        self,
        constraints: Constraints | None,
        subjects: Sequence[Subject],
        faculty: Sequence[Faculty],
        classrooms: Sequence[Classroom],
        option_count: int = 3,
    ) -> list[GeneratedOption]:
        """Run the optimizer ``option_count`` times and rank the results by score."""
        if option_count < 1:
            raise SchedulerError("option_count must be at least 1", details={"option_count": option_count})
        results = [
            self.optimize(constraints, subjects, faculty, classrooms)
            for _ in range(option_count)
        ]
        results.sort(key=lambda item: item.score, reverse=True)
        return [GeneratedOption(rank=index + 1, result=result) for index, result in enumerate(results)]
