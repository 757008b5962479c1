"""Workout execution engine: phase state machine, set progression and cueing."""

from __future__ import annotations

import time
from typing import Callable, Protocol

import structlog

from drillflow.core.config import EngineSettings, get_settings
from drillflow.core.cues import (
    CueDispatcher,
    GuardedCues,
    HapticSink,
    NullCueDispatcher,
    NullHaptics,
)
from drillflow.core.lifecycle import LifecycleReconciler
from drillflow.core.snapshot import EngineSnapshot
from drillflow.core.state import ExecutionSession, Phase
from drillflow.workout.model import (
    CountBased,
    Exercise,
    RepsOnly,
    RepsSets,
    WeightRepsSets,
    Workout,
    countdown_sec,
    set_count,
    target_value,
)


logger = structlog.get_logger(__name__)

SnapshotListener = Callable[[EngineSnapshot], None]


class Ticker(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


class NullTicker:
    """Ticker for hosts that call ``WorkoutEngine.tick`` themselves."""

    def start(self) -> None:
        pass

    def cancel(self) -> None:
        pass


class WorkoutEngine:
    def __init__(
        self,
        workout: Workout,
        *,
        cues: CueDispatcher | None = None,
        haptics: HapticSink | None = None,
        settings: EngineSettings | None = None,
        rest_duration: float | None = None,
        ticker: Ticker | None = None,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._workout = workout
        self._settings = settings or get_settings()
        self._cues = GuardedCues(
            cues or NullCueDispatcher(),
            haptics or NullHaptics(),
            voice_profiles=self._settings.voice_profiles,
            enabled=self._settings.audio_enabled,
        )
        self._ticker: Ticker = ticker or NullTicker()
        self._now = now
        self._listeners: list[SnapshotListener] = []

        initial_rest = self._settings.clamp_rest(
            self._settings.default_rest_sec if rest_duration is None else rest_duration
        )
        self.session = ExecutionSession(
            rest_duration=initial_rest,
            rest_phase_duration=initial_rest,
            set_rest_duration=self._settings.default_set_rest_sec,
        )
        self._lifecycle = LifecycleReconciler(self)

    # -- wiring -----------------------------------------------------------

    @property
    def workout(self) -> Workout:
        return self._workout

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def now(self) -> float:
        return self._now()

    def bind_ticker(self, ticker: Ticker) -> None:
        self._ticker = ticker

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- observable state -------------------------------------------------

    @property
    def phase(self) -> Phase | None:
        return self.session.phase

    @property
    def current_exercise(self) -> Exercise | None:
        index = self.session.current_exercise_index
        if 0 <= index < self._workout.exercise_count:
            return self._workout.exercises[index]
        return None

    @property
    def next_exercise(self) -> Exercise | None:
        index = self.session.current_exercise_index + 1
        if index < self._workout.exercise_count:
            return self._workout.exercises[index]
        return None

    @property
    def was_abandoned(self) -> bool:
        return self.session.abandoned

    @property
    def audio_enabled(self) -> bool:
        return self._cues.enabled

    @property
    def phase_id(self) -> str:
        session = self.session
        kind = session.phase.value if session.phase is not None else "idle"
        index = session.current_exercise_index
        if session.phase is Phase.EXERCISE_ACTIVE:
            if session.is_resting_between_sets:
                return f"setRest:{index}:{session.current_set}"
            exercise = self.current_exercise
            if exercise is not None and exercise.has_sets:
                return f"{kind}:{index}:{session.current_set}"
        return f"{kind}:{index}"

    def snapshot(self) -> EngineSnapshot:
        session = self.session
        exercise = self.current_exercise
        nxt = self.next_exercise
        return EngineSnapshot(
            phase=session.phase,
            current_exercise_index=session.current_exercise_index,
            exercise_count=self._workout.exercise_count,
            exercise_name=exercise.name if exercise else None,
            next_exercise_name=nxt.name if nxt else None,
            is_resting_between_sets=session.is_resting_between_sets,
            current_set=session.current_set,
            total_sets=set_count(exercise.config) if exercise else 1,
            current_count=session.current_count,
            current_reps=session.current_reps,
            target=target_value(exercise.config) if exercise else None,
            auto_completes=exercise.auto_completes if exercise else False,
            time_remaining=session.time_remaining,
            exercise_elapsed=session.exercise_elapsed,
            total_elapsed=session.total_elapsed,
            is_paused=session.is_paused,
            rest_duration=session.rest_duration,
            set_rest_duration=session.set_rest_duration,
            background_duration=session.background_duration,
            audio_enabled=self._cues.enabled,
        )

    # -- session control --------------------------------------------------

    def start(self) -> None:
        session = self.session
        if session.started:
            return

        now = self._now()
        session.session_start = now
        logger.info(
            "workout started",
            workout=self._workout.name,
            exercises=self._workout.exercise_count,
        )
        if self._workout.exercise_count == 0:
            self._complete_workout(now)
            self._publish()
            return

        session.phase = Phase.GET_READY
        session.current_exercise_index = 0
        session.clock.enter_phase(now)
        session.time_remaining = self._settings.get_ready_sec
        first = self._workout.exercises[0]
        self._cues.speak(
            f"Get ready for {first.name}",
            priority="important",
            phase_id="getReady:0",
            phase_kind=Phase.GET_READY.value,
        )
        self._start_ticks()
        self._publish()

    def pause(self) -> None:
        session = self.session
        if not session.running or session.is_paused:
            return

        self._lifecycle.forget_auto_pause()
        now = self._now()
        self._recompute(now)
        session.paused_at = now
        session.clock.pause(now)
        self._ticker.cancel()
        self._cues.pause_all()
        logger.debug("workout paused", phase=session.phase.value)
        self._publish()

    def resume(self) -> None:
        session = self.session
        if not session.is_paused:
            return

        self._lifecycle.forget_auto_pause()
        now = self._now()
        self._clear_pause(now)
        assert session.phase is not None
        self._cues.reset_debounce(f"{session.phase.value}:{session.current_exercise_index}")
        self._start_ticks()
        self._cues.speak(
            "Resume",
            priority="critical",
            phase_id="resume",
            phase_kind=session.phase.value,
        )
        self._recompute(now)
        logger.debug("workout resumed", phase=session.phase.value)
        self._publish()

    def complete_workout(self) -> None:
        if not self.session.running:
            return
        self._complete_workout(self._now())
        self._publish()

    def abandon_workout(self) -> None:
        session = self.session
        if not session.running:
            return

        now = self._now()
        self._ticker.cancel()
        self._cues.stop_all()
        self._recompute_total(now)
        self._clear_pause(now)
        session.phase = Phase.COMPLETED
        session.abandoned = True
        logger.info(
            "workout abandoned",
            workout=self._workout.name,
            exercise_index=session.current_exercise_index,
        )
        self._publish()

    def toggle_audio(self) -> None:
        self._cues.enabled = not self._cues.enabled
        if not self._cues.enabled:
            self._cues.stop_all()
        self._publish()

    # -- index-dependent transitions --------------------------------------

    def start_exercise(self, index: int) -> None:
        if index < 0:
            return
        self._ensure_session_start()
        self._start_exercise(index, self._now())
        self._publish()

    def start_rest(self, before_index: int) -> None:
        if before_index < 0:
            return
        self._ensure_session_start()
        self._start_rest(before_index, self._now())
        self._publish()

    # -- rest control -----------------------------------------------------

    def skip_rest(self) -> None:
        session = self.session
        if session.phase is not Phase.REST_BETWEEN_EXERCISES or session.is_paused:
            return

        self._cues.stop_all()
        self._complete_phase(self._now())
        self._publish()

    def adjust_rest_timer(self, delta_seconds: float) -> None:
        session = self.session
        if session.phase is not Phase.REST_BETWEEN_EXERCISES or session.is_paused:
            return

        now = self._now()
        # The default and a per-exercise override move separately.
        session.rest_duration = self._settings.clamp_rest(session.rest_duration + delta_seconds)
        session.rest_phase_duration = self._settings.clamp_rest(
            session.rest_phase_duration + delta_seconds
        )
        # Elapsed rest is kept as-is; only the target moves.
        session.time_remaining = session.clock.remaining(now, session.rest_phase_duration)
        self._publish()

    # -- exercise progress ------------------------------------------------

    def increment(self, by: int = 1) -> None:
        self._change_progress(by)

    def decrement(self, by: int = 1) -> None:
        self._change_progress(-by)

    def complete_current_exercise(self) -> None:
        if self.session.phase is not Phase.EXERCISE_ACTIVE:
            return
        self._complete_phase(self._now())
        self._publish()

    def complete_current_set(self) -> None:
        session = self.session
        if session.phase is not Phase.EXERCISE_ACTIVE or session.is_resting_between_sets:
            return
        exercise = self.current_exercise
        if exercise is None or not exercise.has_sets:
            return
        self._complete_current_set(exercise, self._now())
        self._publish()

    def complete_set_rest(self) -> None:
        session = self.session
        if session.phase is not Phase.EXERCISE_ACTIVE or not session.is_resting_between_sets:
            return
        self._complete_set_rest(self._now())
        self._publish()

    # -- host lifecycle ---------------------------------------------------

    def on_suspend(self) -> None:
        self._lifecycle.on_suspend()

    def on_resume(self) -> None:
        self._lifecycle.on_resume()

    def clear_background_duration(self) -> None:
        self.session.background_duration = 0.0

    # -- tick -------------------------------------------------------------

    def tick(self) -> None:
        session = self.session
        if not session.running or session.is_paused:
            return

        now = self._now()
        duration = self._recompute(now)
        if duration is not None:
            self._dispatch_countdown_cue()
            if session.time_remaining <= 0:
                self._handle_due(now)
        self._publish()

    def refresh(self) -> None:
        """Recompute timers without firing cues or transitions."""
        if not self.session.running:
            return
        self._recompute(self._now())
        self._publish()

    # -- internals --------------------------------------------------------

    def _phase_duration(self) -> float | None:
        session = self.session
        if session.phase is Phase.GET_READY:
            return self._settings.get_ready_sec
        if session.phase is Phase.REST_BETWEEN_EXERCISES:
            return session.rest_phase_duration
        if session.phase is Phase.EXERCISE_ACTIVE:
            if session.is_resting_between_sets:
                return session.set_rest_duration
            exercise = self.current_exercise
            if exercise is not None and exercise.auto_completes:
                return countdown_sec(exercise.config)
        # Manual exercises run in stopwatch mode.
        return None

    def _recompute(self, now: float) -> float | None:
        session = self.session
        self._recompute_total(now)
        elapsed = session.clock.elapsed(now)
        if session.phase is Phase.EXERCISE_ACTIVE and not session.is_resting_between_sets:
            session.exercise_elapsed = elapsed

        duration = self._phase_duration()
        if duration is None:
            session.time_remaining = 0.0
        else:
            session.time_remaining = max(0.0, duration - elapsed)
        return duration

    def _recompute_total(self, now: float) -> None:
        session = self.session
        if session.session_start is None:
            return
        paused = session.session_paused_total
        if session.paused_at is not None:
            paused += now - session.paused_at
        session.total_elapsed = max(0.0, now - session.session_start - paused)

    def _dispatch_countdown_cue(self) -> None:
        remaining = int(self.session.time_remaining)
        if 1 <= remaining <= self._settings.countdown_cue_window_sec:
            self._cues.tick(remaining, self.phase_id)

    def _handle_due(self, now: float) -> None:
        session = self.session
        if session.phase in (Phase.GET_READY, Phase.REST_BETWEEN_EXERCISES):
            self._complete_phase(now)
            return
        if session.phase is not Phase.EXERCISE_ACTIVE:
            return
        if session.is_resting_between_sets:
            self._complete_set_rest(now)
            return
        exercise = self.current_exercise
        if exercise is None or not exercise.auto_completes:
            return
        if exercise.has_sets:
            self._complete_current_set(exercise, now)
        else:
            self._complete_phase(now)

    def _complete_phase(self, now: float) -> None:
        session = self.session
        self._ticker.cancel()
        assert session.phase is not None
        next_index = session.current_exercise_index + 1
        self._cues.reset_debounce(f"{session.phase.value}:{next_index}")

        if session.phase is Phase.GET_READY:
            self._cues.start()
            self._cues.impact("medium")
            self._start_exercise(0, now)
        elif session.phase is Phase.EXERCISE_ACTIVE:
            if next_index < self._workout.exercise_count:
                self._cues.done_and_announce_next(self._workout.exercises[next_index].name)
                self._cues.notify("success")
                self._start_rest(next_index, now)
            else:
                self._cues.done()
                self._complete_workout(now)
        elif session.phase is Phase.REST_BETWEEN_EXERCISES:
            self._cues.start()
            self._cues.impact("light")
            self._start_exercise(next_index, now)

    def _start_exercise(self, index: int, now: float) -> None:
        if index >= self._workout.exercise_count:
            self._complete_workout(now)
            return

        session = self.session
        exercise = self._workout.exercises[index]
        session.current_exercise_index = index
        session.phase = Phase.EXERCISE_ACTIVE
        session.clock.enter_phase(now)
        session.reset_progress()
        session.set_rest_duration = exercise.resolve_set_rest(self._settings.default_set_rest_sec)
        session.time_remaining = countdown_sec(exercise.config)
        logger.info(
            "phase entered",
            phase=session.phase.value,
            exercise_index=index,
            exercise=exercise.name,
        )
        self._start_ticks()

    def _start_rest(self, before_index: int, now: float) -> None:
        if before_index >= self._workout.exercise_count:
            self._complete_workout(now)
            return

        session = self.session
        session.phase = Phase.REST_BETWEEN_EXERCISES
        session.clock.enter_phase(now)
        session.is_resting_between_sets = False

        finished = self.current_exercise
        override = finished.rest_after_exercise_sec if finished is not None else None
        if override is not None and override > 0:
            session.rest_phase_duration = float(override)
        else:
            session.rest_phase_duration = session.rest_duration
        session.time_remaining = session.rest_phase_duration
        logger.info(
            "phase entered",
            phase=session.phase.value,
            next_exercise_index=before_index,
            rest_sec=session.rest_phase_duration,
        )
        self._start_ticks()

    def _complete_current_set(self, exercise: Exercise, now: float) -> None:
        if self.session.current_set >= set_count(exercise.config):
            self._complete_phase(now)
        else:
            self._start_set_rest(now)

    def _start_set_rest(self, now: float) -> None:
        session = self.session
        session.is_resting_between_sets = True
        session.clock.enter_phase(now)
        session.time_remaining = session.set_rest_duration
        self._cues.done()
        self._cues.notify("success")
        logger.debug(
            "set rest started",
            exercise_index=session.current_exercise_index,
            completed_set=session.current_set,
        )
        self._start_ticks()

    def _complete_set_rest(self, now: float) -> None:
        session = self.session
        session.is_resting_between_sets = False
        session.current_set += 1
        session.current_reps = 0
        session.exercise_elapsed = 0.0
        session.clock.enter_phase(now)
        self._cues.start()
        self._cues.impact("medium")
        exercise = self.current_exercise
        session.time_remaining = countdown_sec(exercise.config) if exercise else 0.0
        logger.debug(
            "set started",
            exercise_index=session.current_exercise_index,
            set=session.current_set,
        )
        self._start_ticks()

    def _complete_workout(self, now: float) -> None:
        session = self.session
        if session.phase is Phase.COMPLETED:
            return

        self._ticker.cancel()
        self._recompute_total(now)
        self._clear_pause(now)
        session.phase = Phase.COMPLETED
        session.is_resting_between_sets = False
        session.time_remaining = 0.0
        self._cues.speak(
            "Workout complete! You crushed it!",
            priority="important",
            phase_id="complete",
            phase_kind=Phase.COMPLETED.value,
        )
        logger.info(
            "workout completed",
            workout=self._workout.name,
            total_elapsed_sec=round(session.total_elapsed, 1),
        )

    def _change_progress(self, delta: int) -> None:
        session = self.session
        if session.phase is not Phase.EXERCISE_ACTIVE or session.is_resting_between_sets:
            return
        exercise = self.current_exercise
        if exercise is None:
            return

        config = exercise.config
        if isinstance(config, CountBased):
            session.current_count = _clamp(session.current_count + delta, config.target_count)
        elif isinstance(config, (RepsOnly, RepsSets, WeightRepsSets)):
            session.current_reps = _clamp(session.current_reps + delta, config.reps)
        else:
            return
        self._cues.impact("light")
        self._publish()

    def _clear_pause(self, now: float) -> None:
        session = self.session
        if session.paused_at is not None:
            session.session_paused_total += max(0.0, now - session.paused_at)
            session.paused_at = None
        session.clock.resume(now)

    def _ensure_session_start(self) -> None:
        if self.session.session_start is None:
            self.session.session_start = self._now()

    def _start_ticks(self) -> None:
        if not self.session.is_paused:
            self._ticker.start()

    def _publish(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as exc:
                logger.warning("snapshot listener failed", error=str(exc))


def _clamp(value: int, ceiling: int) -> int:
    return max(0, min(value, ceiling))
