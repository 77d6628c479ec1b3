"""
Routine Generator Contract
Model selection, usage cost and response normalization for the hosted
chat model that writes training routines.

The model call itself lives outside this service; this module only decides
which model a plan gets, what a call costs, and turns whatever the model
returned into a fully-populated routine.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import Field

from ..exceptions import RoutineValidationError
from ..models import AnalyticsModel

logger = structlog.get_logger(__name__)


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"


MODEL_BY_PLAN = {
    SubscriptionPlan.FREE: "gpt-3.5-turbo",
    SubscriptionPlan.PREMIUM: "gpt-4o-mini",
    SubscriptionPlan.PRO: "gpt-4o",
}

# USD cents per 1K tokens
MODEL_COSTS = {
    "gpt-3.5-turbo": {"prompt": 0.05, "completion": 0.15},
    "gpt-4o-mini": {"prompt": 0.015, "completion": 0.06},
    "gpt-4o": {"prompt": 0.5, "completion": 1.5},
}
DEFAULT_MODEL = "gpt-3.5-turbo"

DIFFICULTIES = ("beginner", "intermediate", "advanced")


class RoutineExercise(AnalyticsModel):
    name: str
    target_sets: int = 3
    target_reps_min: int = 8
    target_reps_max: int = 12
    rest_time_seconds: int = 90
    rpe_target: Optional[float] = None
    notes: Optional[str] = None


class RoutineDay(AnalyticsModel):
    day_of_week: int = 1
    name: str
    description: str = ""
    exercises: List[RoutineExercise] = Field(default_factory=list)


class GeneratedRoutine(AnalyticsModel):
    name: str = "Rutina Personalizada"
    description: str = ""
    difficulty: str = "intermediate"
    duration_weeks: int = 8
    days_per_week: int = 3
    estimated_duration: int = 60
    target_muscle_groups: List[str] = Field(default_factory=list)
    equipment_needed: List[str] = Field(default_factory=list)
    days: List[RoutineDay] = Field(default_factory=list)


def select_model(plan: SubscriptionPlan) -> str:
    return MODEL_BY_PLAN[SubscriptionPlan(plan)]


def calculate_usage_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """
    Approximate cost of one call in USD cents.

    Unknown models are priced as gpt-3.5-turbo.
    """
    costs = MODEL_COSTS.get(model, MODEL_COSTS[DEFAULT_MODEL])
    return (prompt_tokens / 1000) * costs["prompt"] + (completion_tokens / 1000) * costs["completion"]


def _or(value: Any, default: Any) -> Any:
    # Missing, null, zero and empty values all fall back to the default
    return value if value else default


def _clamp(value: int, lower: int, upper: int) -> int:
    return min(upper, max(lower, value))


def _get(data: Dict[str, Any], camel: str, snake: str) -> Any:
    return data.get(camel, data.get(snake))


def _normalize_exercise(raw: Dict[str, Any], position: int) -> RoutineExercise:
    return RoutineExercise(
        name=_or(raw.get("name"), f"Ejercicio {position}"),
        target_sets=_or(_get(raw, "targetSets", "target_sets"), 3),
        target_reps_min=_or(_get(raw, "targetRepsMin", "target_reps_min"), 8),
        target_reps_max=_or(_get(raw, "targetRepsMax", "target_reps_max"), 12),
        rest_time_seconds=_or(_get(raw, "restTimeSeconds", "rest_time_seconds"), 90),
        rpe_target=_get(raw, "rpeTarget", "rpe_target"),
        notes=raw.get("notes"),
    )


def _normalize_day(raw: Dict[str, Any]) -> RoutineDay:
    day_of_week = _or(_get(raw, "dayOfWeek", "day_of_week"), 1)
    return RoutineDay(
        day_of_week=day_of_week,
        name=_or(raw.get("name"), f"Día {day_of_week}"),
        description=_or(raw.get("description"), ""),
        exercises=[
            _normalize_exercise(exercise, position)
            for position, exercise in enumerate(_or(raw.get("exercises"), []), start=1)
        ],
    )


def validate_generated_routine(raw: Union[str, Dict[str, Any]]) -> GeneratedRoutine:
    """
    Fill in and bound a routine returned by the chat model.

    Args:
        raw: The model's JSON answer, as text or already decoded

    Returns:
        A routine with every field populated; weeks clamped to 4-12 and days
        per week to 1-7

    Raises:
        RoutineValidationError: the payload is not JSON, not an object, or
            has fields of the wrong type
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RoutineValidationError(f"Routine is not valid JSON: {e.msg}") from e

    if not isinstance(raw, dict):
        raise RoutineValidationError("Routine must be a JSON object")

    difficulty = raw.get("difficulty")
    if difficulty not in DIFFICULTIES:
        difficulty = "intermediate"

    try:
        routine = GeneratedRoutine(
            name=_or(raw.get("name"), "Rutina Personalizada"),
            description=_or(raw.get("description"), ""),
            difficulty=difficulty,
            duration_weeks=_clamp(_or(_get(raw, "durationWeeks", "duration_weeks"), 8), 4, 12),
            days_per_week=_clamp(_or(_get(raw, "daysPerWeek", "days_per_week"), 3), 1, 7),
            estimated_duration=_or(_get(raw, "estimatedDuration", "estimated_duration"), 60),
            target_muscle_groups=_or(_get(raw, "targetMuscleGroups", "target_muscle_groups"), []),
            equipment_needed=_or(_get(raw, "equipmentNeeded", "equipment_needed"), []),
            days=[_normalize_day(day) for day in _or(raw.get("days"), [])],
        )
    except (TypeError, AttributeError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        raise RoutineValidationError(f"Routine has malformed fields: {e}") from e

    logger.debug("routine_validated", name=routine.name, days=len(routine.days))
    return routine
