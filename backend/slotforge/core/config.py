from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slotforge.core.exceptions import ConfigurationError


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    # Resolve to backend/.env so the engine picks up the same file from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="SLOTFORGE_",
        extra="ignore",
    )

    project_name: str = "SlotForge"
    log_level: str = "INFO"

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

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid SlotForge settings: {exc}") from exc
