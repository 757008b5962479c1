"""Read-only view of the engine state handed to hosts and listeners."""

from __future__ import annotations

from dataclasses import dataclass

from drillflow.core.state import Phase


def format_clock(seconds: float) -> str:
    minutes, secs = divmod(int(max(0.0, seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class EngineSnapshot:
    phase: Phase | None
    current_exercise_index: int
    exercise_count: int
    exercise_name: str | None
    next_exercise_name: str | None
    is_resting_between_sets: bool
    current_set: int
    total_sets: int
    current_count: int
    current_reps: int
    target: int | None
    auto_completes: bool
    time_remaining: float
    exercise_elapsed: float
    total_elapsed: float
    is_paused: bool
    rest_duration: float
    set_rest_duration: float
    background_duration: float
    audio_enabled: bool

    @property
    def progress(self) -> float:
        if self.exercise_count <= 0:
            return 0.0
        return self.current_exercise_index / self.exercise_count

    @property
    def formatted_time_remaining(self) -> str:
        return format_clock(self.time_remaining)

    @property
    def formatted_total_elapsed(self) -> str:
        return format_clock(self.total_elapsed)

    @property
    def formatted_exercise_elapsed(self) -> str:
        return format_clock(self.exercise_elapsed)

    @property
    def state_description(self) -> str:
        if self.phase is None:
            return "Not Started"
        if self.phase is Phase.GET_READY:
            return "Get Ready"
        if self.phase is Phase.EXERCISE_ACTIVE:
            return f"Exercise {self.current_exercise_index + 1} of {self.exercise_count}"
        if self.phase is Phase.REST_BETWEEN_EXERCISES:
            return "Rest Period"
        return "Workout Complete"

    @property
    def welcome_back_message(self) -> str:
        minutes, seconds = divmod(int(self.background_duration), 60)
        if minutes > 0:
            return (
                f"Welcome back! You were gone {minutes}:{seconds:02d}, "
                "resuming workout..."
            )
        return f"Welcome back! You were gone {seconds}s, resuming workout..."

    @property
    def can_adjust_rest(self) -> bool:
        return self.phase is Phase.REST_BETWEEN_EXERCISES and not self.is_paused

    @property
    def can_skip_rest(self) -> bool:
        return self.phase is Phase.REST_BETWEEN_EXERCISES and not self.is_paused
