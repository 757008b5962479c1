"""Audio, speech and haptic cue sinks used by the workout engine.

The engine only ever talks to a ``GuardedCues`` instance: calls are
fire-and-forget, gated by the audio toggle, and any exception raised by a
sink is logged and dropped so cue playback can never disturb a transition.
"""

from __future__ import annotations

from typing import Callable, Literal, Protocol

import structlog


logger = structlog.get_logger(__name__)

CuePriority = Literal["critical", "important", "optional"]
ImpactStyle = Literal["light", "medium", "heavy"]
NotificationKind = Literal["success", "warning", "error"]


class CueDispatcher(Protocol):
    def play_tick(self, seconds_remaining: int, phase_id: str) -> None: ...

    def play_start(self) -> None: ...

    def play_done(self) -> None: ...

    def play_done_and_announce_next(self, name: str) -> None: ...

    def speak(
        self,
        text: str,
        priority: CuePriority,
        phase_id: str,
        voice: str | None = None,
    ) -> None: ...

    def reset_debounce(self, phase_id: str) -> None: ...

    def pause_all(self) -> None: ...

    def stop_all(self) -> None: ...


class HapticSink(Protocol):
    def play_impact(self, style: ImpactStyle) -> None: ...

    def play_notification(self, kind: NotificationKind) -> None: ...


class NullCueDispatcher:
    def play_tick(self, seconds_remaining: int, phase_id: str) -> None:
        pass

    def play_start(self) -> None:
        pass

    def play_done(self) -> None:
        pass

    def play_done_and_announce_next(self, name: str) -> None:
        pass

    def speak(
        self,
        text: str,
        priority: CuePriority,
        phase_id: str,
        voice: str | None = None,
    ) -> None:
        pass

    def reset_debounce(self, phase_id: str) -> None:
        pass

    def pause_all(self) -> None:
        pass

    def stop_all(self) -> None:
        pass


class NullHaptics:
    def play_impact(self, style: ImpactStyle) -> None:
        pass

    def play_notification(self, kind: NotificationKind) -> None:
        pass


class DebouncedCueDispatcher:
    """Drop repeated ticks and utterances for the same phase.

    A foreground reconciliation tick can land on the same countdown second
    as the tick that ran just before suspension; only the first one plays.
    """

    def __init__(self, inner: CueDispatcher) -> None:
        self._inner = inner
        self._last_key = ""

    def play_tick(self, seconds_remaining: int, phase_id: str) -> None:
        key = f"{phase_id}:{seconds_remaining}"
        if key == self._last_key:
            return
        self._last_key = key
        self._inner.play_tick(seconds_remaining, phase_id)

    def play_start(self) -> None:
        self._inner.play_start()

    def play_done(self) -> None:
        self._inner.play_done()

    def play_done_and_announce_next(self, name: str) -> None:
        self._inner.play_done_and_announce_next(name)

    def speak(
        self,
        text: str,
        priority: CuePriority,
        phase_id: str,
        voice: str | None = None,
    ) -> None:
        key = f"{phase_id}:{text}"
        if key == self._last_key:
            return
        self._last_key = key
        self._inner.speak(text, priority, phase_id, voice)

    def reset_debounce(self, phase_id: str) -> None:
        self._last_key = phase_id
        self._inner.reset_debounce(phase_id)

    def pause_all(self) -> None:
        self._inner.pause_all()

    def stop_all(self) -> None:
        self._last_key = ""
        self._inner.stop_all()


class GuardedCues:
    def __init__(
        self,
        dispatcher: CueDispatcher,
        haptics: HapticSink,
        voice_profiles: dict[str, str] | None = None,
        enabled: bool = True,
    ) -> None:
        self._dispatcher = dispatcher
        self._haptics = haptics
        self._voice_profiles = dict(voice_profiles or {})
        self.enabled = enabled

    def voice_for(self, phase_kind: str) -> str | None:
        return self._voice_profiles.get(phase_kind)

    def tick(self, seconds_remaining: int, phase_id: str) -> None:
        self._audio("play_tick", lambda: self._dispatcher.play_tick(seconds_remaining, phase_id))

    def start(self) -> None:
        self._audio("play_start", self._dispatcher.play_start)

    def done(self) -> None:
        self._audio("play_done", self._dispatcher.play_done)

    def done_and_announce_next(self, name: str) -> None:
        self._audio(
            "play_done_and_announce_next",
            lambda: self._dispatcher.play_done_and_announce_next(name),
        )

    def speak(
        self,
        text: str,
        *,
        priority: CuePriority,
        phase_id: str,
        phase_kind: str,
    ) -> None:
        voice = self.voice_for(phase_kind)
        self._audio("speak", lambda: self._dispatcher.speak(text, priority, phase_id, voice))

    def reset_debounce(self, phase_id: str) -> None:
        self._call("reset_debounce", lambda: self._dispatcher.reset_debounce(phase_id))

    def pause_all(self) -> None:
        self._call("pause_all", self._dispatcher.pause_all)

    def stop_all(self) -> None:
        self._call("stop_all", self._dispatcher.stop_all)

    def impact(self, style: ImpactStyle) -> None:
        self._call("play_impact", lambda: self._haptics.play_impact(style))

    def notify(self, kind: NotificationKind) -> None:
        self._call("play_notification", lambda: self._haptics.play_notification(kind))

    def _audio(self, name: str, call: Callable[[], None]) -> None:
        if not self.enabled:
            return
        self._call(name, call)

    def _call(self, name: str, call: Callable[[], None]) -> None:
        try:
            call()
        except Exception as exc:
            logger.warning("cue dispatch failed", cue=name, error=str(exc))
