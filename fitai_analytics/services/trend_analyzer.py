"""
Trend & Plateau Analysis Service
Fits trends to recent performance to predict plateaus and recommend volume

CONCEPTS DEMONSTRATED:
1. Trend Fitting - least squares over short windows of a series
2. Heuristic Scoring - additive likelihoods from independent signals
3. Load Management - adjusting volume from recovery and adaptation
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import structlog

from ..exceptions import InsufficientDataError
from ..models import (
    Exercise,
    ExperienceLevel,
    ExercisePerformance,
    LinearTrend,
    Periodization,
    PlateauPrediction,
    TrendDirection,
    UserProfile,
    VolumeRecommendation,
    WorkoutHistory,
)
from .history import group_exercises, performance_volume, sessions_frame, user_sessions
from .stats import calculate_trend, coefficient_of_variation, mean
from .strength import estimate_one_rep_max

logger = structlog.get_logger(__name__)

MIN_PLATEAU_SESSIONS = 6
MIN_VOLUME_SESSIONS = 4
MIN_EXERCISE_DATA_POINTS = 4

PLATEAU_WINDOW = 6
VOLUME_WINDOW = 8
ADAPTATION_WINDOW = 6

# Plateau likelihood contributions
LOW_GROWTH_SLOPE = 0.05
FLAT_TREND_SLOPE = 0.1
FLAT_TREND_R_SQUARED = 0.8
LOW_VARIABILITY_CV = 0.1
WEEKS_WITHOUT_PR = 4
MIN_SIGNIFICANT_LIKELIHOOD = 0.3

DEFAULT_ADAPTATION_RATE = 0.5
DEFAULT_RECOVERY_SCORE = 0.5


# ============================================
# Plateau detection
# ============================================

def detect_training_plateaus(user_id: str, history: Sequence[WorkoutHistory]) -> List[PlateauPrediction]:
    """
    Predict which exercises are heading into a plateau.

    Args:
        user_id: Whose sessions to analyze
        history: Workout sessions (other users' sessions are ignored)

    Returns:
        Significant plateau predictions, most likely first

    Raises:
        InsufficientDataError: fewer than 6 sessions for the user
    """
    sessions = user_sessions(user_id, history)

    if len(sessions) < MIN_PLATEAU_SESSIONS:
        logger.info("insufficient_data", analysis="plateau_detection",
                    user_id=user_id, sessions=len(sessions))
        raise InsufficientDataError(MIN_PLATEAU_SESSIONS, len(sessions), "plateau detection")

    predictions = []
    for exercise_id, entries in group_exercises(sessions).items():
        prediction = _predict_plateau(exercise_id, entries)
        if prediction is not None:
            predictions.append(prediction)

    predictions.sort(key=lambda p: p.likelihood, reverse=True)

    logger.debug("plateaus_detected", user_id=user_id, exercises=len(predictions))
    return predictions


def _predict_plateau(
    exercise_id: str,
    entries: List[Tuple[pd.Timestamp, ExercisePerformance]],
) -> Optional[PlateauPrediction]:
    if len(entries) < MIN_EXERCISE_DATA_POINTS:
        return None

    recent = entries[-PLATEAU_WINDOW:]
    volumes = [performance_volume(p) for _, p in recent]
    trend = calculate_trend(volumes)

    likelihood = 0.0

    if trend.slope < LOW_GROWTH_SLOPE:
        likelihood += 0.4
    if trend.r_squared > FLAT_TREND_R_SQUARED and trend.slope < FLAT_TREND_SLOPE:
        likelihood += 0.3

    if coefficient_of_variation(volumes) < LOW_VARIABILITY_CV:
        likelihood += 0.2

    weeks_since_pr = weeks_since_last_pr(entries)
    if weeks_since_pr > WEEKS_WITHOUT_PR:
        likelihood += 0.3

    likelihood = round(min(likelihood, 1.0), 2)

    if likelihood < MIN_SIGNIFICANT_LIKELIHOOD:
        return None

    return PlateauPrediction(
        exercise_id=exercise_id,
        exercise_name=recent[0][1].name,
        likelihood=likelihood,
        timeframe=_weeks_to_plateau(trend.slope),
        current_trend=classify_trend(trend.slope),
        recommendations=_plateau_recommendations(likelihood),
        confidence=round(min(len(recent) / 8, 1) * max(trend.r_squared, 0.3), 2),
        weeks_since_last_pr=weeks_since_pr,
    )


def classify_trend(slope: float) -> TrendDirection:
    if slope > 0.1:
        return TrendDirection.INCREASING
    if slope > -0.05:
        return TrendDirection.STABLE
    return TrendDirection.DECREASING


def _weeks_to_plateau(slope: float) -> int:
    denominator = slope + 0.01
    if denominator == 0:
        return 0
    return int(round((1 / denominator) * 2))


def strength_scores(performances: Sequence[ExercisePerformance]) -> List[float]:
    """
    One strength measure per performance, in the same unit for all of them.

    The 1RM (recorded, else estimated from the sets) is used when every
    performance has one; otherwise every performance is scored by volume.
    """
    maxes = [p.one_rep_max or estimate_one_rep_max(p.sets) for p in performances]
    if all(m > 0 for m in maxes):
        return [float(m) for m in maxes]
    return [performance_volume(p) for p in performances]


def weeks_since_last_pr(entries: List[Tuple[pd.Timestamp, ExercisePerformance]]) -> float:
    """
    Weeks between the latest personal record and the latest performance.

    A performance is a PR when its strength score beats every earlier one;
    the first performance always counts as a PR.
    """
    if not entries:
        return 0.0

    best = None
    last_pr_date = entries[0][0]
    scores = strength_scores([performance for _, performance in entries])

    for (performed_on, _), score in zip(entries, scores):
        if best is None or score > best:
            best = score
            last_pr_date = performed_on

    latest = entries[-1][0]
    return round((latest - last_pr_date) / pd.Timedelta(days=7), 2)


def _plateau_recommendations(likelihood: float) -> List[str]:
    if likelihood > 0.7:
        return [
            "Cambiar esquema de repeticiones",
            "Incorporar técnicas de intensidad avanzadas",
            "Programar semana de descarga",
        ]
    if likelihood > 0.4:
        return [
            "Variar tempo de ejecución",
            "Añadir ejercicios accesorios",
        ]
    return []


# ============================================
# Volume recommendation
# ============================================

def calculate_optimal_volume(
    user_id: str,
    history: Sequence[WorkoutHistory],
    user_profile: Optional[UserProfile] = None,
    catalog: Optional[Sequence[Exercise]] = None,
) -> VolumeRecommendation:
    """
    Recommend the next training volume from recovery and adaptation.

    Args:
        user_id: Whose sessions to analyze
        history: Workout sessions
        user_profile: Supplies the experience level that scales the adjustment
        catalog: Exercise catalog used to attribute volume to muscle groups

    Raises:
        InsufficientDataError: fewer than 4 sessions for the user
    """
    sessions = user_sessions(user_id, history)

    if len(sessions) < MIN_VOLUME_SESSIONS:
        logger.info("insufficient_data", analysis="volume_recommendation",
                    user_id=user_id, sessions=len(sessions))
        raise InsufficientDataError(MIN_VOLUME_SESSIONS, len(sessions), "volume recommendation")

    recent = sessions[-VOLUME_WINDOW:]
    frame = sessions_frame(recent)

    current_volume = float(frame['total_volume'].mean())
    volume_trend = (
        calculate_trend(frame['total_volume'].tolist()) if len(recent) >= 3 else LinearTrend()
    )
    recovery_score = calculate_recovery_score(recent)
    adaptation_rate = calculate_adaptation_rate(sessions)

    experience_level = user_profile.experience_level if user_profile else None
    adjustment, reasoning = _volume_adjustment(recovery_score, adaptation_rate, experience_level)

    return VolumeRecommendation(
        user_id=user_id,
        current_volume=round(current_volume, 2),
        recommended_volume=int(round(current_volume * (1 + adjustment))),
        adjustment=round(adjustment * 100, 2),
        reasoning=reasoning,
        muscle_group_breakdown=muscle_group_volume(recent, catalog or [], adjustment),
        periodization=recommend_periodization(adaptation_rate),
        recovery_score=round(recovery_score, 3),
        adaptation_rate=round(adaptation_rate, 3),
        volume_trend=volume_trend,
    )


def calculate_recovery_score(sessions: Sequence[WorkoutHistory]) -> float:
    """
    Mean of recorded recovery scores.

    Without recorded scores recovery is estimated from effort:
    1 - avgRPE/10 * 0.6, floored at 0.
    """
    if not sessions:
        return DEFAULT_RECOVERY_SCORE

    recorded = [w.recovery_score for w in sessions if w.recovery_score is not None]
    if recorded:
        return mean(recorded)

    avg_rpe = mean(w.avg_rpe for w in sessions)
    return max(0.0, 1 - (avg_rpe / 10) * 0.6)


def calculate_adaptation_rate(sessions: Sequence[WorkoutHistory]) -> float:
    """Relative volume change of the last 6 sessions against the 6 before, capped at 1"""
    if len(sessions) < ADAPTATION_WINDOW:
        return DEFAULT_ADAPTATION_RATE

    volumes = [w.total_volume for w in sessions]
    recent_volumes = volumes[-ADAPTATION_WINDOW:]
    older_volumes = volumes[-2 * ADAPTATION_WINDOW:-ADAPTATION_WINDOW]

    if not older_volumes:
        return DEFAULT_ADAPTATION_RATE

    older_avg = mean(older_volumes)
    if older_avg == 0:
        return DEFAULT_ADAPTATION_RATE

    return min((mean(recent_volumes) - older_avg) / older_avg, 1.0)


def _volume_adjustment(
    recovery_score: float,
    adaptation_rate: float,
    experience_level: Optional[ExperienceLevel],
) -> Tuple[float, str]:
    adjustment = 0.0
    reasons = []

    if recovery_score > 0.8:
        adjustment += 0.10
        reasons.append("Buena recuperación permite incremento.")
    elif recovery_score < 0.4:
        adjustment -= 0.15
        reasons.append("Recuperación deficiente requiere reducción.")

    if adaptation_rate > 0.3:
        adjustment += 0.05
        reasons.append("Buena adaptación.")
    elif adaptation_rate < 0.1:
        adjustment -= 0.10
        reasons.append("Adaptación lenta requiere ajuste.")

    if experience_level == ExperienceLevel.BEGINNER:
        adjustment = min(adjustment, 0.15)
    elif experience_level == ExperienceLevel.ADVANCED:
        adjustment *= 0.7

    reasoning = " ".join(reasons) or "Mantener volumen actual basado en análisis de datos."
    return adjustment, reasoning


def recommend_periodization(adaptation_rate: float) -> Periodization:
    if adaptation_rate > 0.3:
        return Periodization.LINEAR
    if adaptation_rate < 0.1:
        return Periodization.UNDULATING
    return Periodization.BLOCK


def muscle_group_volume(
    sessions: Sequence[WorkoutHistory],
    catalog: Sequence[Exercise],
    adjustment: float = 0.0,
) -> Dict[str, int]:
    """
    Recommended per-session volume for each muscle group.

    Each exercise's volume is split evenly across the muscle groups the
    catalog tags it with; exercises missing from the catalog count as "other".
    The per-session average is then scaled by the overall adjustment.
    """
    if not catalog or not sessions:
        return {}

    groups_by_exercise = {exercise.id: exercise.muscle_groups for exercise in catalog}
    totals: Dict[str, float] = defaultdict(float)

    for workout in sessions:
        for performance in workout.exercises:
            groups = groups_by_exercise.get(performance.exercise_id) or ['other']
            share = performance_volume(performance) / len(groups)
            for group in groups:
                totals[group] += share

    return {
        group: int(round(total / len(sessions) * (1 + adjustment)))
        for group, total in sorted(totals.items())
    }
