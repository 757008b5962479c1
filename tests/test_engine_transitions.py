from __future__ import annotations

from drillflow.core.state import Phase
from drillflow.workout.model import (
    CountBased,
    DrillCategory,
    Exercise,
    RepsSets,
    TimeBased,
    Workout,
)


def _two_exercise_workout() -> Workout:
    return Workout(
        name="Scenario",
        exercises=(
            Exercise("Toe Drags", TimeBased(5)),
            Exercise("Snap Shots", CountBased(3)),
        ),
    )


def test_full_scenario_timed_then_manual(make_engine, clock, cues, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())

    engine.start()
    assert engine.phase is Phase.GET_READY
    assert engine.session.time_remaining == 10
    assert cues.calls[0] == ("speak", "Get ready for Toe Drags", "important", "getReady:0", None)

    tick_for(engine, 10)
    assert engine.phase is Phase.EXERCISE_ACTIVE
    assert engine.session.current_exercise_index == 0

    tick_for(engine, 5)
    assert engine.phase is Phase.REST_BETWEEN_EXERCISES
    assert engine.session.time_remaining == 45
    assert ("done_next", "Snap Shots") in cues.calls

    engine.skip_rest()
    assert engine.phase is Phase.EXERCISE_ACTIVE
    assert engine.session.current_exercise_index == 1

    for _ in range(3):
        engine.increment()
    assert engine.session.current_count == 3

    cues.calls.clear()
    engine.complete_current_exercise()

    assert engine.phase is Phase.COMPLETED
    assert "done_next" not in cues.kinds()
    assert cues.kinds()[-2:] == ["done", "speak"]
    assert cues.calls[-1][1] == "Workout complete! You crushed it!"


def test_get_ready_countdown_ticks(make_engine, cues, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()

    tick_for(engine, 9)

    assert cues.ticks() == [
        (5, "getReady:0"),
        (4, "getReady:0"),
        (3, "getReady:0"),
        (2, "getReady:0"),
        (1, "getReady:0"),
    ]
    assert engine.phase is Phase.GET_READY


def test_manual_exercise_never_completes_from_elapsed_time(make_engine, cues, tick_for) -> None:
    engine = make_engine(Workout("Manual", (Exercise("Shots", CountBased(10)),)))
    engine.start()
    tick_for(engine, 10)
    cues.calls.clear()

    tick_for(engine, 3600)

    assert engine.phase is Phase.EXERCISE_ACTIVE
    assert engine.session.time_remaining == 0
    assert engine.session.exercise_elapsed == 3600
    assert cues.ticks() == []


def test_timed_exercise_completes_within_one_tick(make_engine, tick_for) -> None:
    engine = make_engine(Workout("Timed", (Exercise("Plank", TimeBased(30)),)))
    engine.start()
    tick_for(engine, 10)

    tick_for(engine, 29)
    assert engine.phase is Phase.EXERCISE_ACTIVE

    tick_for(engine, 1)
    assert engine.phase is Phase.COMPLETED


def test_rest_auto_completes_into_next_exercise(make_engine, cues, haptics, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 15)
    assert engine.phase is Phase.REST_BETWEEN_EXERCISES

    tick_for(engine, 45)

    assert engine.phase is Phase.EXERCISE_ACTIVE
    assert engine.session.current_exercise_index == 1
    assert cues.kinds()[-1] == "start"
    assert haptics.calls[-1] == ("impact", "light")


def test_start_rest_past_last_exercise_routes_to_completed(make_engine) -> None:
    workout = _two_exercise_workout()
    engine = make_engine(workout)
    engine.start()

    engine.start_rest(workout.exercise_count)

    assert engine.phase is Phase.COMPLETED


def test_start_exercise_out_of_range_routes_to_completed(make_engine) -> None:
    engine = make_engine(_two_exercise_workout())

    engine.start_exercise(7)

    assert engine.phase is Phase.COMPLETED


def test_empty_workout_completes_on_start(make_engine) -> None:
    engine = make_engine(Workout("Empty", ()))

    engine.start()

    assert engine.phase is Phase.COMPLETED


def test_per_exercise_rest_override(make_engine, tick_for) -> None:
    workout = Workout(
        name="Override",
        exercises=(
            Exercise("Sprint", TimeBased(5), rest_after_exercise_sec=60),
            Exercise("Walk", TimeBased(5)),
        ),
    )
    engine = make_engine(workout)
    engine.start()
    tick_for(engine, 15)

    assert engine.phase is Phase.REST_BETWEEN_EXERCISES
    assert engine.session.time_remaining == 60
    assert engine.session.rest_duration == 45


def test_host_rest_preference_is_clamped(make_engine) -> None:
    engine = make_engine(_two_exercise_workout(), rest_duration=600)

    assert engine.session.rest_duration == 300


def test_adjust_rest_timer_clamps_to_bounds(make_engine, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 15)

    engine.adjust_rest_timer(1000)
    assert engine.session.rest_duration == 300

    engine.adjust_rest_timer(-1000)
    assert engine.session.rest_duration == 15


def test_adjust_rest_timer_preserves_elapsed_rest(make_engine, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 15)
    tick_for(engine, 10)
    assert engine.session.time_remaining == 35

    engine.adjust_rest_timer(15)

    assert engine.session.rest_duration == 60
    assert engine.session.time_remaining == 50


def test_adjust_rest_timer_ignored_outside_rest_or_while_paused(make_engine, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    engine.adjust_rest_timer(30)
    assert engine.session.rest_duration == 45

    tick_for(engine, 15)
    engine.pause()
    engine.adjust_rest_timer(30)
    assert engine.session.rest_duration == 45


def test_out_of_phase_calls_are_noops(make_engine) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()

    engine.skip_rest()
    engine.complete_current_set()
    engine.complete_set_rest()
    engine.increment()

    assert engine.phase is Phase.GET_READY
    assert engine.session.current_count == 0


def test_increment_ignored_for_timed_exercise(make_engine, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 10)

    engine.increment()

    assert engine.session.current_count == 0
    assert engine.session.current_reps == 0


def test_count_is_clamped_to_target_and_zero(make_engine, haptics) -> None:
    engine = make_engine(Workout("Shots", (Exercise("Shots", CountBased(3)),)))
    engine.start_exercise(0)

    engine.increment(by=10)
    assert engine.session.current_count == 3

    engine.decrement(by=5)
    assert engine.session.current_count == 0
    assert haptics.calls[-1] == ("impact", "light")


def test_abandon_suppresses_completion_cues(make_engine, cues, ticker, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 12)
    cues.calls.clear()

    engine.abandon_workout()

    assert engine.phase is Phase.COMPLETED
    assert engine.was_abandoned
    assert cues.kinds() == ["stop_all"]
    assert not ticker.running

    engine.complete_workout()
    engine.tick()
    assert cues.kinds() == ["stop_all"]


def test_forced_completion_emits_completion_message(make_engine, cues, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    tick_for(engine, 12)

    engine.complete_workout()

    assert engine.phase is Phase.COMPLETED
    assert not engine.was_abandoned
    assert cues.calls[-1][1] == "Workout complete! You crushed it!"


def test_start_is_only_effective_once(make_engine, clock, cues) -> None:
    engine = make_engine(_two_exercise_workout())
    engine.start()
    clock.advance(3)

    engine.start()

    assert cues.kinds().count("speak") == 1
    assert engine.session.session_start == 1_000.0


def test_set_rest_uses_category_default(make_engine) -> None:
    workout = Workout(
        "Sets",
        (Exercise("Bounds", RepsSets(reps=10, sets=3), DrillCategory.AGILITY),),
    )
    engine = make_engine(workout)

    engine.start_exercise(0)

    assert engine.session.set_rest_duration == 45


def test_adjusting_an_override_rest_keeps_the_default_separate(make_engine, tick_for) -> None:
    workout = Workout(
        "Overrides",
        (
            Exercise("Sprint", TimeBased(5), rest_after_exercise_sec=120),
            Exercise("Shots", CountBased(3)),
            Exercise("Walk", TimeBased(5)),
        ),
    )
    engine = make_engine(workout)
    engine.start()
    tick_for(engine, 15)
    assert engine.session.time_remaining == 120

    engine.adjust_rest_timer(-15)
    assert engine.session.time_remaining == 105
    assert engine.session.rest_duration == 30

    engine.skip_rest()
    engine.complete_current_exercise()

    assert engine.phase is Phase.REST_BETWEEN_EXERCISES
    assert engine.session.rest_phase_duration == 30
    assert engine.session.time_remaining == 30


def test_failing_listener_does_not_stop_transitions(make_engine, tick_for) -> None:
    engine = make_engine(_two_exercise_workout())
    received: list[Phase | None] = []

    def _broken(_snapshot) -> None:
        raise ValueError("display gone")

    engine.subscribe(_broken)
    engine.subscribe(lambda snap: received.append(snap.phase))
    engine.start()
    tick_for(engine, 10)

    assert engine.phase is Phase.EXERCISE_ACTIVE
    assert received[-1] is Phase.EXERCISE_ACTIVE
