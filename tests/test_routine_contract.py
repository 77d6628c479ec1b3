import json

import pytest

from fitai_analytics.exceptions import RoutineValidationError
from fitai_analytics.services.routine_contract import (
    SubscriptionPlan,
    calculate_usage_cost,
    select_model,
    validate_generated_routine,
)


@pytest.mark.parametrize("plan, model", [
    (SubscriptionPlan.FREE, "gpt-3.5-turbo"),
    (SubscriptionPlan.PREMIUM, "gpt-4o-mini"),
    (SubscriptionPlan.PRO, "gpt-4o"),
])
def test_model_per_plan(plan, model):
    assert select_model(plan) == model


def test_usage_cost():
    assert calculate_usage_cost("gpt-4o", 1000, 1000) == pytest.approx(2.0)
    assert calculate_usage_cost("gpt-4o-mini", 2000, 500) == pytest.approx(0.06)
    # unknown models are priced as gpt-3.5-turbo
    assert calculate_usage_cost("mystery-model", 1000, 1000) == pytest.approx(0.2)


def test_empty_routine_gets_defaults():
    routine = validate_generated_routine({})

    assert routine.name == "Rutina Personalizada"
    assert routine.description == ""
    assert routine.difficulty == "intermediate"
    assert routine.duration_weeks == 8
    assert routine.days_per_week == 3
    assert routine.estimated_duration == 60
    assert routine.target_muscle_groups == []
    assert routine.days == []


def test_ranges_are_clamped():
    long_plan = validate_generated_routine({"durationWeeks": 20, "daysPerWeek": 10})
    short_plan = validate_generated_routine({"durationWeeks": 2, "daysPerWeek": 0})

    assert (long_plan.duration_weeks, long_plan.days_per_week) == (12, 7)
    # zero is treated as missing
    assert (short_plan.duration_weeks, short_plan.days_per_week) == (4, 3)


def test_unknown_difficulty_falls_back():
    assert validate_generated_routine({"difficulty": "expert"}).difficulty == "intermediate"
    assert validate_generated_routine({"difficulty": "advanced"}).difficulty == "advanced"


def test_days_and_exercises_are_completed():
    payload = json.dumps({
        "name": "Fuerza 3 días",
        "days": [
            {"dayOfWeek": 3, "exercises": [{"name": "Sentadilla"}, {"targetSets": 5, "rpeTarget": 8}]},
            {},
        ],
    })

    routine = validate_generated_routine(payload)

    wednesday, fallback = routine.days
    assert wednesday.name == "Día 3"
    squat, unnamed = wednesday.exercises
    assert (squat.target_sets, squat.target_reps_min, squat.target_reps_max) == (3, 8, 12)
    assert squat.rest_time_seconds == 90
    assert unnamed.name == "Ejercicio 2"
    assert unnamed.target_sets == 5
    assert unnamed.rpe_target == 8
    assert fallback.day_of_week == 1
    assert fallback.name == "Día 1"


def test_invalid_json_is_rejected():
    with pytest.raises(RoutineValidationError):
        validate_generated_routine("{not json")


def test_non_object_is_rejected():
    with pytest.raises(RoutineValidationError):
        validate_generated_routine("[1, 2, 3]")


def test_malformed_fields_are_rejected():
    with pytest.raises(RoutineValidationError):
        validate_generated_routine({"durationWeeks": "eight"})
    with pytest.raises(RoutineValidationError):
        validate_generated_routine({"days": ["monday"]})
