"""Built-in sample workouts."""

from __future__ import annotations

from dataclasses import dataclass

from drillflow.workout.model import (
    CountBased,
    DrillCategory,
    Exercise,
    RepsSets,
    TimeBased,
    TimeSets,
    WeightRepsSets,
    Workout,
)


@dataclass(frozen=True)
class WorkoutTemplate:
    key: str
    name: str
    category: str
    exercises: tuple[Exercise, ...]


_SHOOTING = DrillCategory.SHOOTING
_HANDS = DrillCategory.STICKHANDLING
_AGILITY = DrillCategory.AGILITY
_CONDITIONING = DrillCategory.CONDITIONING


TEMPLATES: tuple[WorkoutTemplate, ...] = (
    WorkoutTemplate(
        key="elite_shooting",
        name="Elite Shooting Session",
        category="Shooting",
        exercises=(
            Exercise("Quick Release Snap Shots", CountBased(50), _SHOOTING),
            Exercise("Top Shelf Corner Accuracy", CountBased(40), _SHOOTING),
            Exercise("Backhand Shelf Shots", CountBased(30), _SHOOTING),
            Exercise("One-Timer Spot Shooting", CountBased(40), _SHOOTING),
            Exercise("Low Blocker Side Shots", CountBased(40), _SHOOTING),
            Exercise("Wrist Shot Rapid Fire", TimeBased(120), _SHOOTING),
        ),
    ),
    WorkoutTemplate(
        key="stickhandling_mastery",
        name="Stickhandling Mastery",
        category="Stickhandling",
        exercises=(
            Exercise("Toe Drags", TimeBased(90), _HANDS),
            Exercise("One-Hand Control Wide Moves", TimeBased(90), _HANDS),
            Exercise("The Crosby Tight Turns", TimeBased(120), _HANDS),
            Exercise("Forehand-Backhand Transitions", CountBased(100), _HANDS),
            Exercise("Wide-Narrow Pulls", TimeBased(90), _HANDS),
            Exercise("Tennis Ball Speed Hands", TimeBased(180), _HANDS),
        ),
    ),
    WorkoutTemplate(
        key="speed_explosiveness",
        name="Speed & Explosiveness",
        category="Agility",
        exercises=(
            Exercise("Explosive Starts", RepsSets(reps=8, sets=4), _AGILITY),
            Exercise("Lateral Bounds", RepsSets(reps=20, sets=3), _AGILITY),
            Exercise("Single-Leg Skater Hops", RepsSets(reps=16, sets=3), _AGILITY),
            Exercise("5-10-5 Shuttle", RepsSets(reps=6, sets=3), _AGILITY),
            Exercise("Cone Weave Sprint", TimeBased(60), _AGILITY),
        ),
    ),
    WorkoutTemplate(
        key="lower_body_power",
        name="Lower Body Power",
        category="Strength",
        exercises=(
            Exercise("Goblet Squats", WeightRepsSets(weight=45, reps=12, sets=3), _CONDITIONING),
            Exercise(
                "Dumbbell Romanian Deadlifts",
                WeightRepsSets(weight=50, reps=12, sets=3),
                _CONDITIONING,
            ),
            Exercise(
                "Dumbbell Walking Lunges",
                WeightRepsSets(weight=35, reps=20, sets=3),
                _CONDITIONING,
            ),
            Exercise("Dumbbell Step-Ups", WeightRepsSets(weight=35, reps=12, sets=3), _CONDITIONING),
        ),
    ),
    WorkoutTemplate(
        key="full_body_conditioning",
        name="Full Body Conditioning",
        category="Conditioning",
        exercises=(
            Exercise("Mountain Climbers", TimeSets(45, sets=3, rest_sec=45), _CONDITIONING),
            Exercise("Plank Shoulder Taps", TimeSets(45, sets=3, rest_sec=30), _CONDITIONING),
            Exercise("Skater Hops", TimeBased(60), _AGILITY, rest_after_exercise_sec=60),
            Exercise("Burpees", CountBased(20), _CONDITIONING),
        ),
    ),
)


def list_templates() -> tuple[WorkoutTemplate, ...]:
    return TEMPLATES


def build_workout_from_template(template_key: str) -> Workout:
    template = next((item for item in TEMPLATES if item.key == template_key), None)
    if template is None:
        raise KeyError(f"Unknown workout template '{template_key}'")
    return Workout(name=template.name, exercises=template.exercises)
