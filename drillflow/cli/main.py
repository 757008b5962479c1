"""Terminal host for running a workout session."""

from __future__ import annotations

import argparse
import asyncio
import sys
import threading

import structlog

from drillflow.core.config import EngineSettings, get_settings
from drillflow.core.cues import CuePriority, DebouncedCueDispatcher
from drillflow.core.engine import WorkoutEngine
from drillflow.core.logging import configure_logging
from drillflow.core.snapshot import EngineSnapshot
from drillflow.core.state import Phase
from drillflow.workout.library import build_workout_from_template, list_templates
from drillflow.workout.model import Workout, display_summary
from drillflow.workout.parser import WorkoutParseError, load_workout
from drillflow.workout.runner import WorkoutRunner


logger = structlog.get_logger(__name__)

COMMAND_HELP = (
    "Commands: + / - count, d done exercise, s done set / end set rest, "
    "n skip rest, ] / [ rest +/-, p pause/resume, z suspend, a foreground, q quit"
)


class ConsoleCues:
    """Prints cues instead of playing them."""

    def play_tick(self, seconds_remaining: int, phase_id: str) -> None:
        print(f"  tick {seconds_remaining}")

    def play_start(self) -> None:
        print("  >> START")

    def play_done(self) -> None:
        print("  >> DONE")

    def play_done_and_announce_next(self, name: str) -> None:
        print(f"  >> DONE. Great work! Up next: {name}")

    def speak(
        self,
        text: str,
        priority: CuePriority,
        phase_id: str,
        voice: str | None = None,
    ) -> None:
        print(f"  [voice] {text}")

    def reset_debounce(self, phase_id: str) -> None:
        pass

    def pause_all(self) -> None:
        pass

    def stop_all(self) -> None:
        pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="drillflow workout runner")
    parser.add_argument("--list", action="store_true", help="List built-in workouts")
    parser.add_argument("--template", default=None, help="Run a built-in workout by key")
    parser.add_argument("--workout", default=None, help="Run a workout from a .json/.csv file")
    parser.add_argument(
        "--rest",
        type=float,
        default=None,
        help="Rest between exercises in seconds (clamped to the configured bounds)",
    )
    parser.add_argument("--no-audio", action="store_true", help="Disable cue output")
    parser.add_argument("--log-level", default=None, help="Override log level")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def apply_command(engine: WorkoutEngine, command: str) -> bool:
    """Map one terminal command onto an engine operation."""
    key = command.strip().lower()
    if key == "+":
        engine.increment()
    elif key == "-":
        engine.decrement()
    elif key == "d":
        engine.complete_current_exercise()
    elif key == "s":
        if engine.session.is_resting_between_sets:
            engine.complete_set_rest()
        else:
            engine.complete_current_set()
    elif key == "n":
        engine.skip_rest()
    elif key == "]":
        engine.adjust_rest_timer(engine.settings.rest_step_sec)
    elif key == "[":
        engine.adjust_rest_timer(-engine.settings.rest_step_sec)
    elif key == "p":
        if engine.session.is_paused:
            engine.resume()
        else:
            engine.pause()
    elif key == "z":
        engine.on_suspend()
    elif key == "a":
        engine.on_resume()
        if engine.session.background_duration > 0:
            print(engine.snapshot().welcome_back_message)
            engine.clear_background_duration()
    elif key == "q":
        engine.abandon_workout()
    else:
        return False
    return True


def format_status(snapshot: EngineSnapshot) -> str:
    parts = [snapshot.state_description]
    if snapshot.phase is Phase.EXERCISE_ACTIVE and snapshot.exercise_name:
        parts.append(snapshot.exercise_name)
        if snapshot.total_sets > 1:
            label = "rest" if snapshot.is_resting_between_sets else "set"
            parts.append(f"{label} {snapshot.current_set}/{snapshot.total_sets}")
        if snapshot.target is not None:
            done = snapshot.current_count or snapshot.current_reps
            parts.append(f"{done}/{snapshot.target}")
    if snapshot.auto_completes or snapshot.phase is not Phase.EXERCISE_ACTIVE or (
        snapshot.is_resting_between_sets
    ):
        parts.append(snapshot.formatted_time_remaining)
    else:
        parts.append(f"+{snapshot.formatted_exercise_elapsed}")
    parts.append(f"total {snapshot.formatted_total_elapsed}")
    if snapshot.is_paused:
        parts.append("PAUSED")
    return " | ".join(parts)


def resolve_workout(args: argparse.Namespace) -> Workout:
    if args.workout:
        return load_workout(args.workout)
    return build_workout_from_template(args.template)


def _start_input_thread(loop: asyncio.AbstractEventLoop, engine: WorkoutEngine) -> None:
    def _read() -> None:
        for line in sys.stdin:
            loop.call_soon_threadsafe(apply_command, engine, line)

    threading.Thread(target=_read, daemon=True).start()


def build_runner(audio: bool, settings: EngineSettings | None = None) -> WorkoutRunner:
    base = settings or get_settings()
    return WorkoutRunner(
        cues=DebouncedCueDispatcher(ConsoleCues()),
        settings=base.model_copy(update={"audio_enabled": audio}),
    )


async def run_session(workout: Workout, rest: float | None, audio: bool) -> int:
    runner = build_runner(audio)
    finished: list[bool] = []

    print(f"{workout.name}: {workout.exercise_count} exercises")
    for index, exercise in enumerate(workout.exercises, start=1):
        print(f"  {index}. {exercise.name} ({display_summary(exercise.config)})")
    print(COMMAND_HELP)

    engine = await runner.start(
        workout,
        on_progress=lambda snap: print(format_status(snap)),
        on_finish=finished.append,
        rest_duration=rest,
    )

    _start_input_thread(asyncio.get_running_loop(), engine)
    await runner.wait_finished()
    completed = bool(finished and finished[-1])
    print("Workout complete" if completed else "Workout abandoned")
    return 0 if completed else 1


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, args.json_logs or settings.log_json)

    if args.list:
        for template in list_templates():
            print(f"{template.key:<24} {template.name} [{template.category}]")
        return 0

    if args.template is None and args.workout is None:
        parser.print_help()
        return 1

    try:
        workout = resolve_workout(args)
    except (WorkoutParseError, KeyError) as exc:
        logger.error("cannot load workout", error=str(exc))
        return 2

    try:
        return asyncio.run(run_session(workout, args.rest, audio=not args.no_audio))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
