from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from fitai_analytics.models import (
    Exercise,
    ExercisePerformance,
    PerformanceMetrics,
    SetPerformance,
    WorkoutHistory,
)

BASE_DATE = datetime(2024, 1, 1, 9, 0)


def _build_session(index, user_id="user-1", total_volume=1000.0, avg_rpe=7.0,
                   duration=60.0, exercises=(), recovery_score=None, heart_rate_data=None):
    # One session per week, starting on BASE_DATE
    return WorkoutHistory(
        id=f"{user_id}-w{index}",
        user_id=user_id,
        date=BASE_DATE + timedelta(weeks=index),
        exercises=list(exercises),
        duration=duration,
        total_volume=total_volume,
        avg_rpe=avg_rpe,
        recovery_score=recovery_score,
        heart_rate_data=heart_rate_data,
    )


def _build_performance(exercise_id, volume=1000.0, weight=100.0, reps=5, sets=1, one_rep_max=None):
    return ExercisePerformance(
        exercise_id=exercise_id,
        name=exercise_id.replace("-", " ").title(),
        sets=[SetPerformance(reps=reps, weight=weight) for _ in range(sets)],
        total_volume=volume,
        one_rep_max=one_rep_max,
    )


def _build_exercise(exercise_id, muscle_groups, **fields):
    fields.setdefault("name", exercise_id.replace("-", " ").title())
    return Exercise(id=exercise_id, muscle_groups=list(muscle_groups), **fields)


def _build_metrics(hour=9, day=1, **fields):
    return PerformanceMetrics(date=datetime(2024, 1, day, hour, 0), **fields)


@pytest.fixture
def make_session():
    return _build_session


@pytest.fixture
def make_performance():
    return _build_performance


@pytest.fixture
def make_exercise():
    return _build_exercise


@pytest.fixture
def make_metrics():
    return _build_metrics


@pytest.fixture
def catalog():
    return [
        _build_exercise("back-squat", ["quads", "glutes"], category="legs",
                        equipment=["barbell", "rack"], difficulty=6, compound=True,
                        contraindications=["knee"], form_cues=["Rodillas alineadas"]),
        _build_exercise("goblet-squat", ["quads", "glutes"], category="legs",
                        equipment=["dumbbell"], difficulty=3, compound=True),
        _build_exercise("leg-press", ["quads"], category="legs",
                        equipment=["machine"], difficulty=4, compound=True,
                        contraindications=["knee"]),
        _build_exercise("leg-extension", ["quads"], category="legs",
                        equipment=["machine"], difficulty=2),
        _build_exercise("bench-press", ["chest", "triceps"], category="push",
                        equipment=["barbell", "bench"], difficulty=5, compound=True),
        _build_exercise("push-up", ["chest", "triceps"], category="push",
                        equipment=["bodyweight"], difficulty=3, compound=True),
        _build_exercise("barbell-row", ["back", "biceps"], category="pull",
                        equipment=["barbell"], difficulty=5, compound=True),
        _build_exercise("biceps-curl", ["biceps"], category="pull",
                        equipment=["dumbbell"], difficulty=2),
    ]


@pytest.fixture
def client():
    from fitai_analytics.main import app

    with TestClient(app) as c:
        yield c
