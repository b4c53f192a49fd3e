from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from time import perf_counter
from typing import Sequence

from slotforge.schemas.generator import GenerationSettings
from slotforge.schemas.timetable import (
    WORKING_DAYS,
    Classroom,
    Faculty,
    Subject,
    TimeSlot,
    WeeklySchedule,
)
from slotforge.services.candidate_generator import CandidateGenerator
from slotforge.services.conflict_detector import clashes_with_any, count_clashes
from slotforge.services.metrics import daily_overload, room_utilization, workload_balance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitnessContext:
    faculty: tuple[Faculty, ...]
    classrooms: tuple[Classroom, ...]
    slots: tuple[TimeSlot, ...]
    max_classes_per_day: int
    required_sessions: dict[str, int]

    @classmethod
    def build(
        cls,
        *,
        subjects: Sequence[Subject],
        faculty: Sequence[Faculty],
        classrooms: Sequence[Classroom],
        slots: Sequence[TimeSlot],
        max_classes_per_day: int,
    ) -> FitnessContext:
        return cls(
            faculty=tuple(faculty),
            classrooms=tuple(classrooms),
            slots=tuple(slots),
            max_classes_per_day=max_classes_per_day,
            required_sessions={subject.id: subject.required_sessions for subject in subjects},
        )


@dataclass
class Individual:
    schedule: WeeklySchedule
    fitness: float | None = None


@dataclass
class SearchOutcome:
    best: WeeklySchedule
    fitness: float
    generations_run: int
    fitness_history: list[float] = field(default_factory=list)


class GeneticSearch:
    def __init__(
        self,
        *,
        generator: CandidateGenerator,
        context: FitnessContext,
        settings: GenerationSettings,
        rng: random.Random,
    ) -> None:
        self.generator = generator
        self.context = context
        self.settings = settings
        self.random = rng

    def evaluate(self, schedule: WeeklySchedule) -> float:
        weights = self.settings.fitness_weights
        score = weights.base
        score -= weights.conflict_penalty * count_clashes(schedule)
        score += weights.balance_bonus * workload_balance(schedule, self.context.faculty)
        score += weights.utilization_bonus * room_utilization(
            schedule,
            self.context.classrooms,
            len(self.context.slots),
        )
        score -= weights.daily_overload_penalty * daily_overload(schedule, self.context.max_classes_per_day)
        return max(0.0, score)

    def select(self, population: Sequence[Individual]) -> Individual:
        contenders = self.random.choices(population, k=self.settings.tournament_size)
        return max(contenders, key=lambda item: item.fitness)

    def crossover(self, parent_a: WeeklySchedule, parent_b: WeeklySchedule) -> WeeklySchedule:
        """Per day, take each parent session with a coin flip unless it would clash.

        Fixed sessions are always inherited. A subject never receives more
        sessions than it requires.
        """
        child = WeeklySchedule.empty()
        placed: Counter = Counter()
        rate = self.settings.crossover_inclusion_rate
        for day in WORKING_DAYS:
            pool = parent_a.for_day(day) + parent_b.for_day(day)
            accepted = child.for_day(day)
            for session in pool:
                if session.is_fixed and session not in accepted:
                    accepted.append(session)
                    placed[session.subject_id] += 1
            for session in pool:
                if session.is_fixed:
                    continue
                if self.random.random() >= rate:
                    continue
                if placed[session.subject_id] >= self.context.required_sessions.get(session.subject_id, 0):
                    continue
                if clashes_with_any(session, accepted):
                    continue
                accepted.append(session)
                placed[session.subject_id] += 1
        return child

    def mutate(self, schedule: WeeklySchedule) -> bool:
        """Move one random movable session to a random slot, keeping faculty and room."""
        if not self.context.slots:
            return False
        days = [day for day in WORKING_DAYS if any(not item.is_fixed for item in schedule.for_day(day))]
        if not days:
            return False
        day_sessions = schedule.for_day(self.random.choice(days))
        index = self.random.choice([i for i, item in enumerate(day_sessions) if not item.is_fixed])
        new_slot = self.random.choice(self.context.slots)
        day_sessions[index] = day_sessions[index].model_copy(update={"time_slot": new_slot})
        return True

    def _evaluate_population(self, population: list[Individual]) -> None:
        for individual in population:
            if individual.fitness is None:
                individual.fitness = self.evaluate(individual.schedule)
        population.sort(key=lambda item: item.fitness, reverse=True)

    def _next_generation(self, ranked: list[Individual]) -> list[Individual]:
        next_population = ranked[: self.settings.elite_count]
        while len(next_population) < self.settings.population_size:
            parent_a = self.select(ranked)
            parent_b = self.select(ranked)
            child = self.crossover(parent_a.schedule, parent_b.schedule)
            if self.random.random() < self.settings.mutation_rate:
                self.mutate(child)
            next_population.append(Individual(schedule=child))
        return next_population

    def _budget_exhausted(self, started: float) -> bool:
        budget = self.settings.time_budget_seconds
        return budget is not None and perf_counter() - started >= budget

    def run(self, base: WeeklySchedule) -> SearchOutcome:
        started = perf_counter()
        population = [
            Individual(schedule=self.generator.generate(base))
            for _ in range(self.settings.population_size)
        ]
        self._evaluate_population(population)
        history = [population[0].fitness]

        generations_run = 0
        for generation in range(self.settings.generations):
            if self._budget_exhausted(started):
                logger.info(
                    "Time budget of %ss reached after %s generations",
                    self.settings.time_budget_seconds,
                    generations_run,
                )
                break
            population = self._next_generation(population)
            self._evaluate_population(population)
            history.append(population[0].fitness)
            generations_run += 1
            logger.debug("Generation %s best fitness %.3f", generation + 1, population[0].fitness)

        best = population[0]
        return SearchOutcome(
            best=best.schedule,
            fitness=best.fitness,
            generations_run=generations_run,
            fitness_history=history,
        )
