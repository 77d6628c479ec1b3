import pytest

from fitai_analytics.models import DayType, SlotPreference, TimeSlot
from fitai_analytics.services.scheduler import (
    analyze_time_performance,
    find_optimal_workout_times,
    normalize_day,
    optimize_workout_timing,
    predict_adherence,
    time_of_day,
)


def _slot(day, start, preference=SlotPreference.ACCEPTABLE):
    return TimeSlot(day=day, start_time=start, preference=preference)


def _plan_types(plan):
    return {d.day: d.type for d in plan.days}


def test_time_of_day_boundaries():
    assert time_of_day("06:30") == "morning"
    assert time_of_day("11:59") == "morning"
    assert time_of_day("12:00") == "afternoon"
    assert time_of_day("16:59") == "afternoon"
    assert time_of_day("17:00") == "evening"


def test_day_names_are_normalized():
    assert normalize_day("monday") == "Monday"
    assert normalize_day("Miércoles") == "Wednesday"
    assert normalize_day("someday") is None


def test_default_time_performance_without_history():
    assert analyze_time_performance([]) == {"morning": 0.85, "afternoon": 0.75, "evening": 0.90}


def test_time_performance_from_satisfaction(make_metrics):
    data = [
        make_metrics(hour=7, day=1, satisfaction=4),
        make_metrics(hour=8, day=2, satisfaction=4),
        make_metrics(hour=19, day=3, satisfaction=9),
    ]

    assert analyze_time_performance(data) == {"morning": 0.4, "afternoon": 0.5, "evening": 0.9}


def test_slots_ranked_by_time_of_day_and_last_resort_dropped():
    slots = [
        _slot("Monday", "13:00"),
        _slot("Tuesday", "07:00"),
        _slot("Wednesday", "18:00"),
        _slot("Thursday", "19:00", SlotPreference.LAST_RESORT),
    ]

    ranked = find_optimal_workout_times(slots, analyze_time_performance([]))

    assert [s.day for s in ranked] == ["Wednesday", "Tuesday", "Monday"]


def test_alternating_days_get_active_recovery_between():
    schedule = [_slot(day, "18:00", SlotPreference.PREFERRED) for day in ("Monday", "Wednesday", "Friday")]

    result = optimize_workout_timing(schedule, [])
    types = _plan_types(result.schedule.weekly_plan)

    assert len(result.schedule.weekly_plan.days) == 7
    assert [d for d, t in types.items() if t == DayType.WORKOUT] == ["Monday", "Wednesday", "Friday"]
    assert types["Tuesday"] == DayType.ACTIVE_RECOVERY
    assert types["Thursday"] == DayType.ACTIVE_RECOVERY
    assert types["Saturday"] == DayType.REST
    assert types["Sunday"] == DayType.REST
    assert result.adherence_prediction == 0.95
    assert "Horarios alineados con tu mejor rendimiento" in result.success_factors
    assert result.risk_factors == []


def test_defaults_without_usable_slots():
    schedule = [_slot("Saturday", "07:00", SlotPreference.LAST_RESORT)]

    result = optimize_workout_timing(schedule, [])
    plan = result.schedule.weekly_plan
    workout_days = [d.day for d in plan.days if d.type == DayType.WORKOUT]

    assert workout_days == ["Monday", "Wednesday", "Friday"]
    assert all(d.time_slot is None for d in plan.days)
    assert result.adherence_prediction == 0.5
    assert plan.intensity_distribution.moderate == 50
    assert plan.recovery_score == 0.8
    assert any("plan estándar" in r for r in result.risk_factors)


def test_plan_uses_at_most_three_days_and_offers_alternative():
    schedule = [_slot(day, "18:00") for day in
                ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")]

    result = optimize_workout_timing(schedule, [])

    plan = result.schedule.weekly_plan
    assert sum(1 for d in plan.days if d.type == DayType.WORKOUT) == 3
    assert len(result.schedule.alternatives) == 1
    alternative_days = [d.day for d in result.schedule.alternatives[0].days if d.type == DayType.WORKOUT]
    assert alternative_days == ["Thursday", "Friday", "Saturday"]


def test_consecutive_days_are_flagged():
    schedule = [_slot("Monday", "18:00"), _slot("Tuesday", "18:00")]

    result = optimize_workout_timing(schedule, [])

    assert "Sesiones en días consecutivos pueden acumular fatiga" in result.risk_factors
    assert "Pocas franjas disponibles limitan la frecuencia semanal" in result.risk_factors


def test_history_shapes_the_plan(make_metrics):
    data = [
        make_metrics(hour=7, day=1, satisfaction=9, volume=1000, intensity=4, fatigue=2, adherence=1.0),
        make_metrics(hour=8, day=3, satisfaction=8, volume=2000, intensity=6, fatigue=4, adherence=0.8),
        make_metrics(hour=19, day=5, satisfaction=3, volume=1500, intensity=8, fatigue=3, adherence=0.6),
        make_metrics(hour=20, day=6, satisfaction=2, volume=1500, intensity=9, fatigue=3, adherence=0.6),
    ]
    schedule = [_slot("Monday", "19:00"), _slot("Thursday", "07:00")]

    result = optimize_workout_timing(schedule, data)
    plan = result.schedule.weekly_plan

    workout = [d for d in plan.days if d.type == DayType.WORKOUT]
    assert workout[0].day == "Monday" and workout[1].day == "Thursday"
    assert plan.total_volume == 3000
    assert plan.recovery_score == 0.7
    assert plan.intensity_distribution.low == 25
    assert plan.intensity_distribution.moderate == 25
    assert plan.intensity_distribution.high == 50


def test_morning_slot_ranks_first_when_mornings_go_best(make_metrics):
    data = [make_metrics(hour=7, satisfaction=9), make_metrics(hour=19, satisfaction=3)]
    slots = [_slot("Monday", "19:00"), _slot("Thursday", "07:00")]

    ranked = find_optimal_workout_times(slots, analyze_time_performance(data))

    assert [s.day for s in ranked] == ["Thursday", "Monday"]


def test_adherence_blends_recorded_history(make_metrics):
    slots = [_slot("Monday", "07:00", SlotPreference.PREFERRED)]

    # 0.5 + 0.3 + 0.05 blended with a recorded 0.55
    assert predict_adherence(slots, []) == pytest.approx(0.85)
    assert predict_adherence(slots, [make_metrics(adherence=0.55)]) == pytest.approx(0.7)
    assert predict_adherence([], []) == 0.5


def test_timing_is_repeatable(make_metrics):
    schedule = [_slot("Monday", "18:00"), _slot("Thursday", "07:00", SlotPreference.PREFERRED)]
    data = [make_metrics(hour=7, satisfaction=7, fatigue=5)]

    assert optimize_workout_timing(schedule, data) == optimize_workout_timing(schedule, data)
