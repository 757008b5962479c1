"""Suspend/resume handling for the workout engine.

Hosts translate their platform signals (app backgrounded, screen locked,
laptop lid closed) into ``on_suspend`` / ``on_resume``. No ticks are assumed
to run in between: the phase clock is timestamp based, so one recomputation
after resuming is enough to catch up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from drillflow.core.engine import WorkoutEngine


logger = structlog.get_logger(__name__)


class LifecycleReconciler:
    def __init__(self, engine: WorkoutEngine) -> None:
        self._engine = engine
        self._auto_paused = False

    @property
    def auto_paused(self) -> bool:
        return self._auto_paused

    def forget_auto_pause(self) -> None:
        """Hand ownership of the pause state back to the host."""
        self._auto_paused = False

    def on_suspend(self) -> None:
        engine = self._engine
        session = engine.session
        if not session.running or session.is_paused:
            # An explicit user pause survives the round trip untouched.
            return

        session.backgrounded_at = engine.now()
        engine.pause()
        self._auto_paused = True
        logger.info("session suspended", phase=session.phase.value if session.phase else None)

    def on_resume(self) -> None:
        engine = self._engine
        session = engine.session
        if session.backgrounded_at is not None:
            session.background_duration = max(0.0, engine.now() - session.backgrounded_at)
            session.backgrounded_at = None
            logger.info(
                "session foregrounded",
                background_sec=round(session.background_duration, 1),
            )

        if not self._auto_paused:
            engine.refresh()
            return

        self._auto_paused = False
        if not session.running or not session.is_paused:
            engine.refresh()
            return
        engine.resume()
        engine.tick()
