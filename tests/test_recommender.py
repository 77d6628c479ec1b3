import pytest

from fitai_analytics.models import (
    Constraint,
    ConstraintType,
    ExperienceLevel,
    Severity,
    TrendDirection,
    UserPreferences,
    UserProfile,
)
from fitai_analytics.services.recommender import (
    MAX_SUBSTITUTIONS,
    MAX_WORKOUT_EXERCISES,
    generate_exercise_substitutions,
    generate_workout_recommendation,
    is_allowed,
    recommend_deload_week,
)


def _by_id(catalog, exercise_id):
    return next(e for e in catalog if e.id == exercise_id)


# ============================================
# Substitutions
# ============================================

def test_substitutions_share_a_muscle_group(catalog):
    squat = _by_id(catalog, "back-squat")

    substitutions = generate_exercise_substitutions(squat, catalog)

    assert 0 < len(substitutions) <= MAX_SUBSTITUTIONS
    assert all(set(s.muscle_groups) & set(squat.muscle_groups) for s in substitutions)
    assert squat not in substitutions


def test_closest_match_ranks_first(catalog):
    squat = _by_id(catalog, "back-squat")

    substitutions = generate_exercise_substitutions(squat, catalog)

    assert substitutions[0].id == "goblet-squat"


def test_substitutions_are_capped(make_exercise):
    original = make_exercise("row", ["back"])
    catalog = [original] + [make_exercise(f"row-{i}", ["back"]) for i in range(9)]

    assert len(generate_exercise_substitutions(original, catalog)) == MAX_SUBSTITUTIONS


def test_equipment_and_injury_constraints_filter_candidates(catalog):
    squat = _by_id(catalog, "back-squat")
    constraints = [
        Constraint(type=ConstraintType.EQUIPMENT, severity=Severity.MODERATE,
                   description="No machine available"),
        Constraint(type=ConstraintType.INJURY, severity=Severity.HIGH,
                   description="Knee tendinitis"),
    ]

    ids = [e.id for e in generate_exercise_substitutions(squat, catalog, constraints)]

    assert "leg-press" not in ids
    assert "leg-extension" not in ids
    assert "goblet-squat" in ids


def test_is_allowed_without_constraints(catalog):
    assert all(is_allowed(e, []) for e in catalog)


def test_blank_catalog_terms_never_match(make_exercise):
    constraints = [
        Constraint(type=ConstraintType.EQUIPMENT, severity=Severity.MODERATE,
                   description="No machine available"),
        Constraint(type=ConstraintType.INJURY, severity=Severity.HIGH,
                   description="Knee tendinitis"),
    ]
    band_pull = make_exercise("band-pull", ["back"], equipment=[""], contraindications=["  "])
    hack_squat = make_exercise("hack-squat", ["quads"], equipment=["", "machine"])

    assert is_allowed(band_pull, constraints)
    assert not is_allowed(hack_squat, constraints)


# ============================================
# Workout prescription
# ============================================

def test_workout_respects_exercise_limit_and_is_repeatable(catalog):
    profile = UserProfile(id="user-1", goals=["hypertrophy"],
                          preferences=UserPreferences(workout_duration=120))

    first = generate_workout_recommendation(profile, catalog)
    second = generate_workout_recommendation(profile, catalog)

    assert first == second
    assert first.id.startswith("workout_")
    assert 0 < len(first.exercises) <= MAX_WORKOUT_EXERCISES
    assert all(e.reps == "8-12" for e in first.exercises)
    assert first.name == "Entrenamiento de Hipertrofia - Volumen Optimizado"


def test_workout_covers_new_muscle_groups_first(catalog):
    profile = UserProfile(id="user-1", preferences=UserPreferences(workout_duration=120))

    workout = generate_workout_recommendation(profile, catalog)

    assert {"quads", "chest", "back"} <= set(workout.focus)


def test_strength_prescription(catalog):
    profile = UserProfile(id="user-1", goals=["strength"], experience_level=ExperienceLevel.ADVANCED,
                          preferences=UserPreferences(workout_duration=180))

    workout = generate_workout_recommendation(profile, catalog)
    compound = [e for e in workout.exercises if e.exercise.compound]

    assert compound
    assert all(e.rest == 180 for e in compound)
    assert all(e.reps == "3-5" and e.rpe == "8-9" for e in workout.exercises)
    assert workout.name == "Entrenamiento de Fuerza - Movimientos Compuestos"


def test_beginner_prescription(catalog):
    profile = UserProfile(id="user-1", experience_level=ExperienceLevel.BEGINNER,
                          preferences=UserPreferences(workout_duration=120))

    workout = generate_workout_recommendation(profile, catalog)

    assert all(e.sets == 2 and e.rpe == "6-7" for e in workout.exercises)
    assert all(len(e.notes) <= 3 for e in workout.exercises)
    assert any("técnica" in note for e in workout.exercises for note in e.notes)


def test_workout_is_trimmed_to_preferred_duration(catalog):
    profile = UserProfile(id="user-1", goals=["hypertrophy"],
                          preferences=UserPreferences(workout_duration=30))

    workout = generate_workout_recommendation(profile, catalog)

    assert len(workout.exercises) == 1
    assert workout.estimated_duration <= 30


def test_workout_from_empty_catalog():
    workout = generate_workout_recommendation(UserProfile(id="user-1"), [])

    assert workout.exercises == []
    assert workout.difficulty == 1
    assert workout.estimated_duration == 20


def test_workout_avoids_constrained_exercises(catalog):
    profile = UserProfile(
        id="user-1",
        preferences=UserPreferences(workout_duration=180),
        constraints=[Constraint(type=ConstraintType.EQUIPMENT, severity=Severity.LOW,
                                description="Sin barbell en casa")],
    )

    workout = generate_workout_recommendation(profile, catalog)

    assert all("barbell" not in e.exercise.equipment for e in workout.exercises)


# ============================================
# Deload
# ============================================

def test_high_fatigue_calls_for_immediate_deload(make_metrics):
    markers = [make_metrics(day=d, fatigue=f) for d, f in [(1, 8), (2, 8), (3, 9)]]

    deload = recommend_deload_week(markers)

    assert deload.severity == Severity.HIGH
    assert deload.timing == "Inmediato"
    assert deload.duration == 7
    assert [m.reduction for m in deload.modifications] == [50, 30]
    assert deload.fatigue_trend == TrendDirection.INCREASING


def test_moderate_fatigue(make_metrics):
    deload = recommend_deload_week([make_metrics(day=d, fatigue=6) for d in (1, 2)])

    assert deload.severity == Severity.MODERATE
    assert deload.timing == "Próxima semana"
    assert deload.duration == 5
    assert deload.fatigue_trend == TrendDirection.STABLE


def test_no_markers_means_light_deload():
    deload = recommend_deload_week([])

    assert deload.severity == Severity.LOW
    assert deload.duration == 3
    assert deload.average_fatigue == 0
    assert [m.reduction for m in deload.modifications] == [30]


def test_falling_fatigue(make_metrics):
    deload = recommend_deload_week([make_metrics(day=1, fatigue=6), make_metrics(day=2, fatigue=4)])

    assert deload.fatigue_trend == TrendDirection.DECREASING
    assert deload.average_fatigue == pytest.approx(5.0)
