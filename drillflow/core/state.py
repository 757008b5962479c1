"""Mutable execution state owned by the workout engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from drillflow.core.clock import PhaseClock


class Phase(str, Enum):
    GET_READY = "getReady"
    EXERCISE_ACTIVE = "exerciseActive"
    REST_BETWEEN_EXERCISES = "rest"
    COMPLETED = "completed"

    @property
    def is_running(self) -> bool:
        return self is not Phase.COMPLETED


@dataclass
class ExecutionSession:
    phase: Phase | None = None
    current_exercise_index: int = 0
    is_resting_between_sets: bool = False
    current_set: int = 1
    current_count: int = 0
    current_reps: int = 0
    paused_at: float | None = None
    session_start: float | None = None
    session_paused_total: float = 0.0
    backgrounded_at: float | None = None
    background_duration: float = 0.0
    rest_duration: float = 45.0
    rest_phase_duration: float = 45.0
    set_rest_duration: float = 30.0
    time_remaining: float = 0.0
    exercise_elapsed: float = 0.0
    total_elapsed: float = 0.0
    abandoned: bool = False
    clock: PhaseClock = field(default_factory=PhaseClock)

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    @property
    def started(self) -> bool:
        return self.phase is not None

    @property
    def running(self) -> bool:
        return self.phase is not None and self.phase.is_running

    def reset_progress(self) -> None:
        self.current_count = 0
        self.current_reps = 0
        self.current_set = 1
        self.is_resting_between_sets = False
        self.exercise_elapsed = 0.0
