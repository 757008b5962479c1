from __future__ import annotations

from typing import Any, Callable

import pytest

from drillflow.core.config import EngineSettings
from drillflow.core.engine import WorkoutEngine
from drillflow.workout.model import Workout


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class RecordingCues:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def play_tick(self, seconds_remaining: int, phase_id: str) -> None:
        self.calls.append(("tick", seconds_remaining, phase_id))

    def play_start(self) -> None:
        self.calls.append(("start",))

    def play_done(self) -> None:
        self.calls.append(("done",))

    def play_done_and_announce_next(self, name: str) -> None:
        self.calls.append(("done_next", name))

    def speak(self, text: str, priority: str, phase_id: str, voice: str | None = None) -> None:
        self.calls.append(("speak", text, priority, phase_id, voice))

    def reset_debounce(self, phase_id: str) -> None:
        self.calls.append(("reset", phase_id))

    def pause_all(self) -> None:
        self.calls.append(("pause_all",))

    def stop_all(self) -> None:
        self.calls.append(("stop_all",))

    def kinds(self) -> list[str]:
        return [call[0] for call in self.calls]

    def ticks(self) -> list[tuple[int, str]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "tick"]


class RecordingHaptics:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def play_impact(self, style: str) -> None:
        self.calls.append(("impact", style))

    def play_notification(self, kind: str) -> None:
        self.calls.append(("notify", kind))


class RecordingTicker:
    def __init__(self) -> None:
        self.running = False
        self.starts = 0
        self.cancels = 0

    def start(self) -> None:
        self.running = True
        self.starts += 1

    def cancel(self) -> None:
        self.running = False
        self.cancels += 1


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(voice_profiles={"rest": "calm-voice"})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cues() -> RecordingCues:
    return RecordingCues()


@pytest.fixture
def haptics() -> RecordingHaptics:
    return RecordingHaptics()


@pytest.fixture
def ticker() -> RecordingTicker:
    return RecordingTicker()


@pytest.fixture
def make_engine(
    settings: EngineSettings,
    clock: FakeClock,
    cues: RecordingCues,
    haptics: RecordingHaptics,
    ticker: RecordingTicker,
) -> Callable[..., WorkoutEngine]:
    def _make(workout: Workout, **kwargs: Any) -> WorkoutEngine:
        return WorkoutEngine(
            workout,
            cues=cues,
            haptics=haptics,
            settings=settings,
            ticker=ticker,
            now=clock,
            **kwargs,
        )

    return _make


def run_ticks(engine: WorkoutEngine, clock: FakeClock, seconds: int) -> None:
    for _ in range(seconds):
        clock.advance(1.0)
        engine.tick()


@pytest.fixture
def tick_for(clock: FakeClock) -> Callable[[WorkoutEngine, int], None]:
    def _tick_for(engine: WorkoutEngine, seconds: int) -> None:
        run_ticks(engine, clock, seconds)

    return _tick_for
