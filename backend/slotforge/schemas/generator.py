from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from slotforge.core.config import Settings
from slotforge.schemas.conflict import Conflict
from slotforge.schemas.timetable import WeeklySchedule


class ScoreWeights(BaseModel):
    utilization: float = Field(default=0.25, ge=0.0, le=1.0)
    balance: float = Field(default=0.30, ge=0.0, le=1.0)
    student_satisfaction: float = Field(default=0.25, ge=0.0, le=1.0)
    time_slot_efficiency: float = Field(default=0.20, ge=0.0, le=1.0)


class FitnessWeights(BaseModel):
    base: float = 100.0
    conflict_penalty: float = Field(default=10.0, ge=0.0)
    balance_bonus: float = Field(default=20.0, ge=0.0)
    utilization_bonus: float = Field(default=15.0, ge=0.0)
    daily_overload_penalty: float = Field(default=5.0, ge=0.0)


class GenerationSettings(BaseModel):
    population_size: int = Field(default=50, ge=2, le=2000)
    generations: int = Field(default=100, ge=1, le=5000)
    mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    elite_fraction: float = Field(default=0.2, ge=0.0, lt=1.0)
    tournament_size: int = Field(default=3, ge=1, le=50)
    crossover_inclusion_rate: float = Field(default=0.5, ge=0.0, le=1.0)
    random_seed: int | None = Field(default=None, ge=0)
    time_budget_seconds: float | None = Field(default=None, gt=0)
    student_satisfaction_estimate: float = Field(default=0.85, ge=0.0, le=1.0)
    time_slot_efficiency_estimate: float = Field(default=0.90, ge=0.0, le=1.0)
    report_constraint_violations: bool = True
    fitness_weights: FitnessWeights = Field(default_factory=FitnessWeights)
    score_weights: ScoreWeights = Field(default_factory=ScoreWeights)

    @model_validator(mode="after")
    def validate_relationships(self) -> GenerationSettings:
        if self.tournament_size > self.population_size:
            raise ValueError("tournament_size cannot exceed population_size")
        return self

    @property
    def elite_count(self) -> int:
        if self.elite_fraction <= 0:
            return 0
        return max(1, int(self.population_size * self.elite_fraction))

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationSettings:
        return cls(
            population_size=settings.population_size,
            generations=settings.generations,
            mutation_rate=settings.mutation_rate,
            elite_fraction=settings.elite_fraction,
            tournament_size=settings.tournament_size,
            crossover_inclusion_rate=settings.crossover_inclusion_rate,
            random_seed=settings.random_seed,
            time_budget_seconds=settings.time_budget_seconds,
            student_satisfaction_estimate=settings.student_satisfaction_estimate,
            time_slot_efficiency_estimate=settings.time_slot_efficiency_estimate,
            report_constraint_violations=settings.report_constraint_violations,
        )


class OptimizationMetrics(BaseModel):
    utilization: float = Field(ge=0.0, le=1.0)
    balance: float = Field(ge=0.0, le=1.0)
    student_satisfaction: float = Field(ge=0.0, le=1.0)
    time_slot_efficiency: float = Field(ge=0.0, le=1.0)


class OptimizationResult(BaseModel):
    schedule: WeeklySchedule
    score: float = Field(ge=0.0, le=100.0)
    metrics: OptimizationMetrics
    conflicts: list[Conflict] = Field(default_factory=list)
    fitness: float = 0.0
    generations_run: int = 0
    runtime_ms: int = 0


class GeneratedOption(BaseModel):
    rank: int
    result: OptimizationResult
