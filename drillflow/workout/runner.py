"""asyncio host for the workout engine: the periodic tick and session lifetime."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from drillflow.core.config import EngineSettings, get_settings
from drillflow.core.cues import CueDispatcher, HapticSink
from drillflow.core.engine import WorkoutEngine
from drillflow.core.snapshot import EngineSnapshot
from drillflow.core.state import Phase
from drillflow.workout.model import Workout


ProgressCallback = Callable[[EngineSnapshot], None]
FinishCallback = Callable[[bool], None]


class AsyncTicker:
    """Calls ``engine.tick()`` every interval until cancelled.

    ``start`` always replaces the running loop, so each phase gets ticks
    aligned to its own start.
    """

    def __init__(self, engine: WorkoutEngine, interval_sec: float = 1.0) -> None:
        self._engine = engine
        self._interval_sec = interval_sec
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_sec)
            self._engine.tick()


class WorkoutRunner:
    def __init__(
        self,
        *,
        cues: CueDispatcher | None = None,
        haptics: HapticSink | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._cues = cues
        self._haptics = haptics
        self._settings = settings or get_settings()
        self._engine: WorkoutEngine | None = None
        self._ticker: AsyncTicker | None = None
        self._finished: asyncio.Event = asyncio.Event()
        self._on_finish: FinishCallback | None = None

    @property
    def engine(self) -> WorkoutEngine | None:
        return self._engine

    @property
    def is_running(self) -> bool:
        return (
            self._engine is not None
            and self._engine.phase is not None
            and self._engine.phase is not Phase.COMPLETED
        )

    async def start(
        self,
        workout: Workout,
        on_progress: ProgressCallback,
        on_finish: FinishCallback,
        rest_duration: float | None = None,
    ) -> WorkoutEngine:
        if self.is_running:
            raise RuntimeError("Workout already running")

        engine = WorkoutEngine(
            workout,
            cues=self._cues,
            haptics=self._haptics,
            settings=self._settings,
            rest_duration=rest_duration,
        )
        ticker = AsyncTicker(engine, interval_sec=self._settings.tick_interval_sec)
        engine.bind_ticker(ticker)

        self._finished = asyncio.Event()
        self._on_finish = on_finish
        self._engine = engine
        self._ticker = ticker

        engine.subscribe(on_progress)
        engine.subscribe(self._watch_completion)
        engine.start()
        return engine

    async def stop(self) -> None:
        """Abandon the running session, if any, and wait for it to wind down."""
        if self._engine is None or not self.is_running:
            return
        self._engine.abandon_workout()
        await self._finished.wait()

    async def wait_finished(self) -> None:
        await self._finished.wait()

    def _watch_completion(self, snapshot: EngineSnapshot) -> None:
        if snapshot.phase is not Phase.COMPLETED or self._finished.is_set():
            return
        if self._ticker is not None:
            self._ticker.cancel()
        self._finished.set()
        if self._on_finish is not None:
            # Abandoned sessions stop short of the last exercise.
            self._on_finish(self._completed_normally())

    def _completed_normally(self) -> bool:
        return self._engine is not None and not self._engine.was_abandoned
