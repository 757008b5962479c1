"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union


WeightUnit = Literal["lbs", "kg"]


class DrillCategory(str, Enum):
    STICKHANDLING = "Stickhandling"
    SKATING = "Skating"
    SHOOTING = "Shooting"
    PASSING = "Passing"
    AGILITY = "Agility"
    CONDITIONING = "Conditioning"
    SKILL_DEVELOPMENT = "Skill Development"

    @property
    def default_rest_between_sets(self) -> float:
        # 0 means continuous work; the engine falls back to its own default.
        if self in (DrillCategory.STICKHANDLING, DrillCategory.SKILL_DEVELOPMENT):
            return 0.0
        if self in (DrillCategory.SHOOTING, DrillCategory.PASSING):
            return 30.0
        if self in (DrillCategory.SKATING, DrillCategory.AGILITY):
            return 45.0
        return 90.0


@dataclass(frozen=True)
class TimeBased:
    duration_sec: float


@dataclass(frozen=True)
class TimeSets:
    duration_sec: float
    sets: int
    rest_sec: float | None = None


@dataclass(frozen=True)
class CountBased:
    target_count: int


@dataclass(frozen=True)
class RepsOnly:
    reps: int


@dataclass(frozen=True)
class RepsSets:
    reps: int
    sets: int


@dataclass(frozen=True)
class WeightRepsSets:
    weight: float
    reps: int
    sets: int
    rest_sec: float | None = None
    unit: WeightUnit = "lbs"


ExerciseConfig = Union[TimeBased, TimeSets, CountBased, RepsOnly, RepsSets, WeightRepsSets]

SetBasedConfig = (TimeSets, RepsSets, WeightRepsSets)


def is_auto_completing(config: ExerciseConfig) -> bool:
    """Timed variants finish on their own; everything else waits for the user."""
    return isinstance(config, (TimeBased, TimeSets))


def is_set_based(config: ExerciseConfig) -> bool:
    return isinstance(config, SetBasedConfig)


def set_count(config: ExerciseConfig) -> int:
    if isinstance(config, SetBasedConfig):
        return config.sets
    return 1


def countdown_sec(config: ExerciseConfig) -> float:
    """Duration of one active countdown, or 0 for stopwatch-mode exercises."""
    if isinstance(config, (TimeBased, TimeSets)):
        return float(config.duration_sec)
    return 0.0


def target_value(config: ExerciseConfig) -> int | None:
    if isinstance(config, CountBased):
        return config.target_count
    if isinstance(config, (RepsOnly, RepsSets, WeightRepsSets)):
        return config.reps
    return None


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    if minutes > 0:
        return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"
    return f"{secs}s"


def display_summary(config: ExerciseConfig) -> str:
    if isinstance(config, TimeBased):
        return format_duration(config.duration_sec)
    if isinstance(config, TimeSets):
        base = f"{format_duration(config.duration_sec)} • {config.sets} sets"
        if config.rest_sec is not None:
            return f"{base} • {format_duration(config.rest_sec)} rest"
        return base
    if isinstance(config, CountBased):
        return f"{config.target_count} count"
    if isinstance(config, RepsOnly):
        return f"{config.reps} reps"
    if isinstance(config, RepsSets):
        return f"{config.sets}×{config.reps}"
    return f"{int(config.weight)} {config.unit} • {config.sets}×{config.reps}"


@dataclass(frozen=True)
class Exercise:
    name: str
    config: ExerciseConfig
    category: DrillCategory = DrillCategory.CONDITIONING
    rest_between_sets_sec: float | None = None
    rest_after_exercise_sec: float | None = None

    @property
    def auto_completes(self) -> bool:
        return is_auto_completing(self.config)

    @property
    def has_sets(self) -> bool:
        return is_set_based(self.config)

    def resolve_set_rest(self, fallback_sec: float) -> float:
        if self.rest_between_sets_sec is not None and self.rest_between_sets_sec > 0:
            return float(self.rest_between_sets_sec)
        config_rest = getattr(self.config, "rest_sec", None)
        if config_rest is not None and config_rest > 0:
            return float(config_rest)
        category_rest = self.category.default_rest_between_sets
        if self.has_sets and category_rest > 0:
            return category_rest
        return float(fallback_sec)


@dataclass(frozen=True)
class Workout:
    name: str
    exercises: tuple[Exercise, ...]

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)
