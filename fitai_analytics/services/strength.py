"""
Strength & Training Stress Service
One-rep max estimation and per-session training stress scoring
"""

import math
from typing import Dict, List, Sequence

import numpy as np
import structlog

from ..models import SetPerformance, TrainingStressPoint, WorkoutHistory
from .history import user_sessions
from .stats import mean, moving_average

logger = structlog.get_logger(__name__)

# Sets above this rep count are too far from a true max to extrapolate from
MAX_ESTIMATION_REPS = 10


def _formula_estimates(weight: float, reps: int) -> Dict[str, float]:
    """Epley, Brzycki and Lombardi estimates for one set"""
    return {
        'epley': weight * (1 + reps / 30),
        # Brzycki's denominator reaches zero near 37 reps
        'brzycki': weight / (1.0278 - 0.0278 * reps) if reps < 37 else weight * 2,
        'lombardi': weight * (reps ** 0.10),
    }


def calculate_1rm(weight: float, reps: int, formula: str = 'average') -> float:
    """
    Calculate estimated 1RM using various formulas.

    Args:
        weight: Weight lifted
        reps: Number of reps
        formula: Which formula to use ('epley', 'brzycki', 'lombardi', 'average')

    Returns:
        Estimated 1RM
    """
    if reps < 1 or weight <= 0:
        return 0
    if reps == 1:
        return weight

    formulas = _formula_estimates(weight, reps)

    if formula == 'average':
        return float(np.mean(list(formulas.values())))

    return formulas.get(formula, formulas['epley'])


def estimate_one_rep_max(sets: Sequence[SetPerformance]) -> int:
    """
    Estimate 1RM from recent sets using the mean of three formulas.

    Only sets of 1-10 reps contribute. Every qualifying set adds all three
    estimates to the pool and the rounded mean of the pool is returned.
    Returns 0 when no set qualifies.
    """
    estimates: List[float] = []

    for performed in sets:
        if 1 <= performed.reps <= MAX_ESTIMATION_REPS:
            estimates.extend(_formula_estimates(performed.weight, performed.reps).values())

    if not estimates:
        return 0

    return int(round(np.mean(estimates)))


def calculate_training_stress_score(session: WorkoutHistory) -> int:
    """
    Score the physiological load of one session.

    Product of duration (capped at 2h), log-scaled volume, RPE and, when
    available, average heart rate relative to 150 bpm (capped at 1.5).
    """
    duration_factor = min(session.duration / 60, 2)
    volume_factor = math.log(session.total_volume / 1000 + 1)
    intensity_factor = session.avg_rpe / 10

    heart_rate_factor = 1.0
    if session.heart_rate_data:
        avg_hr = mean(point.value for point in session.heart_rate_data)
        heart_rate_factor = min(avg_hr / 150, 1.5)

    return int(round(
        duration_factor * volume_factor * intensity_factor * heart_rate_factor * 100
    ))


def training_stress_series(
    user_id: str,
    history: Sequence[WorkoutHistory],
    window: int = 3,
) -> List[TrainingStressPoint]:
    """Stress score of each of the user's sessions with its trailing moving average"""
    sessions = user_sessions(user_id, history)
    scores = [calculate_training_stress_score(w) for w in sessions]
    smoothed = moving_average(scores, window)

    logger.debug("training_stress_series", user_id=user_id, sessions=len(sessions), window=window)

    return [
        TrainingStressPoint(
            workout_id=w.id,
            date=w.date,
            stress_score=score,
            moving_average=avg,
        )
        for w, score, avg in zip(sessions, scores, smoothed)
    ]
