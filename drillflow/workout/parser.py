"""Workout file parser (CSV/JSON)."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from drillflow.workout.model import (
    CountBased,
    DrillCategory,
    Exercise,
    ExerciseConfig,
    RepsOnly,
    RepsSets,
    TimeBased,
    TimeSets,
    WeightRepsSets,
    Workout,
)


class WorkoutParseError(ValueError):
    """Raised when a workout file is invalid."""


CONFIG_TYPES = ("time", "time_sets", "count", "reps", "reps_sets", "weight_reps_sets")

CSV_HEADERS = (
    "name,type[,category,duration_sec,sets,reps,count,weight,unit,"
    "rest_sec,rest_between_sets_sec,rest_after_sec]"
)


def load_workout(path: str | Path) -> Workout:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return _load_json(file_path)
    if suffix == ".csv":
        return _load_csv(file_path)
    raise WorkoutParseError(
        f"Unsupported workout format '{file_path.suffix}'. Use .json or .csv"
    )


def _load_json(path: Path) -> Workout:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorkoutParseError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkoutParseError("Workout JSON must be an object")

    name_obj = data.get("name", path.stem)
    if not isinstance(name_obj, str):
        raise WorkoutParseError("Workout field 'name' must be a string")

    exercises_obj = data.get("exercises")
    if not isinstance(exercises_obj, list):
        raise WorkoutParseError("Workout field 'exercises' must be an array")

    exercises: list[Exercise] = []
    for i, raw in enumerate(exercises_obj):
        if not isinstance(raw, dict):
            raise WorkoutParseError(f"Exercise {i + 1}: must be an object")
        exercises.append(build_exercise(raw, index=i))

    return _build_workout(name=name_obj.strip() or path.stem, exercises=exercises)


def _load_csv(path: Path) -> Workout:
    rows: list[Exercise] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        fields = set(reader.fieldnames or [])
        if not {"name", "type"}.issubset(fields):
            raise WorkoutParseError(f"CSV must contain headers: {CSV_HEADERS}")

        for i, row in enumerate(reader):
            rows.append(build_exercise(dict(row), index=i))

    return _build_workout(name=path.stem, exercises=rows)


def build_exercise(raw: dict[str, Any], *, index: int) -> Exercise:
    name_obj = raw.get("name")
    name = str(name_obj).strip() if name_obj is not None else ""
    if not name:
        raise WorkoutParseError(f"Exercise {index + 1}: name is required")

    return Exercise(
        name=name,
        config=_build_config(raw, index=index),
        category=_parse_category(raw.get("category"), index=index),
        rest_between_sets_sec=_parse_optional_seconds(
            raw.get("rest_between_sets_sec"), "rest_between_sets_sec", index
        ),
        rest_after_exercise_sec=_parse_optional_seconds(
            raw.get("rest_after_sec"), "rest_after_sec", index
        ),
    )


def _build_config(raw: dict[str, Any], *, index: int) -> ExerciseConfig:
    kind = str(raw.get("type") or "").strip().lower()
    if kind not in CONFIG_TYPES:
        raise WorkoutParseError(
            f"Exercise {index + 1}: type must be one of {', '.join(CONFIG_TYPES)}"
        )

    if kind == "time":
        return TimeBased(duration_sec=_positive_seconds(raw, "duration_sec", index))
    if kind == "time_sets":
        return TimeSets(
            duration_sec=_positive_seconds(raw, "duration_sec", index),
            sets=_positive_int(raw, "sets", index),
            rest_sec=_parse_optional_seconds(raw.get("rest_sec"), "rest_sec", index),
        )
    if kind == "count":
        return CountBased(target_count=_positive_int(raw, "count", index))
    if kind == "reps":
        return RepsOnly(reps=_positive_int(raw, "reps", index))
    if kind == "reps_sets":
        return RepsSets(
            reps=_positive_int(raw, "reps", index),
            sets=_positive_int(raw, "sets", index),
        )

    unit = str(raw.get("unit") or "lbs").strip().lower()
    if unit not in ("lbs", "kg"):
        raise WorkoutParseError(f"Exercise {index + 1}: unit must be lbs or kg")
    weight = _parse_float_field(raw=raw.get("weight"), field_name="weight", index=index)
    if weight < 0:
        raise WorkoutParseError(f"Exercise {index + 1}: weight must be >= 0")
    return WeightRepsSets(
        weight=weight,
        reps=_positive_int(raw, "reps", index),
        sets=_positive_int(raw, "sets", index),
        rest_sec=_parse_optional_seconds(raw.get("rest_sec"), "rest_sec", index),
        unit="kg" if unit == "kg" else "lbs",
    )


def _build_workout(*, name: str, exercises: list[Exercise]) -> Workout:
    if not exercises:
        raise WorkoutParseError("Workout must contain at least one exercise")
    return Workout(name=name, exercises=tuple(exercises))


def _parse_category(raw: object, *, index: int) -> DrillCategory:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return DrillCategory.CONDITIONING
    text = str(raw).strip()
    for category in DrillCategory:
        if text.lower() in (category.value.lower(), category.name.lower()):
            return category
    raise WorkoutParseError(f"Exercise {index + 1}: unknown category '{text}'")


def _positive_int(raw: dict[str, Any], field_name: str, index: int) -> int:
    value = _parse_int_field(raw=raw.get(field_name), field_name=field_name, index=index)
    if value <= 0:
        raise WorkoutParseError(f"Exercise {index + 1}: {field_name} must be > 0")
    return value


def _positive_seconds(raw: dict[str, Any], field_name: str, index: int) -> float:
    value = _parse_float_field(raw=raw.get(field_name), field_name=field_name, index=index)
    if value <= 0:
        raise WorkoutParseError(f"Exercise {index + 1}: {field_name} must be > 0")
    return value


def _parse_optional_seconds(raw: object, field_name: str, index: int) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, str) and raw.strip() == "":
        return None
    value = _parse_float_field(raw=raw, field_name=field_name, index=index)
    if value <= 0:
        raise WorkoutParseError(f"Exercise {index + 1}: {field_name} must be > 0")
    return value


def _parse_int_field(*, raw: object, field_name: str, index: int) -> int:
    if raw is None:
        raise WorkoutParseError(f"Exercise {index + 1}: invalid {field_name}")
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise WorkoutParseError(f"Exercise {index + 1}: invalid {field_name}") from exc


def _parse_float_field(*, raw: object, field_name: str, index: int) -> float:
    if raw is None:
        raise WorkoutParseError(f"Exercise {index + 1}: invalid {field_name}")
    try:
        return float(str(raw).strip())
    except ValueError as exc:
        raise WorkoutParseError(f"Exercise {index + 1}: invalid {field_name}") from exc
