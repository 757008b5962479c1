"""Timestamp-based phase clock.

Elapsed time is always recomputed from absolute wall-clock readings, never
accumulated per tick, so a suspended process picks up exactly where real
time says it should be once it is running again.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PhaseClock:
    phase_start: float | None = None
    paused_at: float | None = None
    accumulated_paused: float = 0.0

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    def enter_phase(self, now: float) -> None:
        self.phase_start = now
        self.accumulated_paused = 0.0
        # A phase entered while paused stays paused from its own start.
        if self.paused_at is not None:
            self.paused_at = now

    def pause(self, now: float) -> None:
        if self.paused_at is None:
            self.paused_at = now

    def resume(self, now: float) -> float:
        """Clear the pause and return how long it lasted."""
        if self.paused_at is None:
            return 0.0
        paused_for = max(0.0, now - self.paused_at)
        self.accumulated_paused += paused_for
        self.paused_at = None
        return paused_for

    def elapsed(self, now: float) -> float:
        if self.phase_start is None:
            return 0.0
        # While paused the clock is frozen at the moment the pause began.
        reference = self.paused_at if self.paused_at is not None else now
        return max(0.0, (reference - self.phase_start) - self.accumulated_paused)

    def remaining(self, now: float, duration: float) -> float:
        return max(0.0, duration - self.elapsed(now))
