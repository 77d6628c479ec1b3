"""
Workout History Helpers
Selection and reshaping of the session records supplied by the caller
"""

from typing import Dict, List, Sequence, Tuple

import pandas as pd

from ..models import ExercisePerformance, WorkoutHistory


def user_sessions(user_id: str, history: Sequence[WorkoutHistory]) -> List[WorkoutHistory]:
    """Sessions belonging to `user_id`, oldest first"""
    sessions = [w for w in history if w.user_id == user_id]
    # sorted() is stable, so same-day sessions keep the caller's order
    return sorted(sessions, key=lambda w: w.date)


def sessions_frame(sessions: Sequence[WorkoutHistory]) -> pd.DataFrame:
    """One row per session with the columns the analyzers aggregate over"""
    return pd.DataFrame(
        [
            {
                'workout_id': w.id,
                'workout_date': w.date,
                'total_volume': w.total_volume,
                'avg_rpe': w.avg_rpe,
                'recovery_score': w.recovery_score,
                'duration': w.duration,
            }
            for w in sessions
        ],
        columns=['workout_id', 'workout_date', 'total_volume', 'avg_rpe',
                 'recovery_score', 'duration'],
    )


def group_exercises(
    sessions: Sequence[WorkoutHistory],
) -> Dict[str, List[Tuple[pd.Timestamp, ExercisePerformance]]]:
    """
    Collect every performance of each exercise across sessions.

    Returns:
        exercise_id -> [(session date, performance), ...] in session order
    """
    groups: Dict[str, List[Tuple[pd.Timestamp, ExercisePerformance]]] = {}

    for workout in sessions:
        for performance in workout.exercises:
            groups.setdefault(performance.exercise_id, []).append(
                (pd.Timestamp(workout.date), performance)
            )

    return groups


def performance_volume(performance: ExercisePerformance) -> float:
    """Recorded volume, or weight x reps over the sets when none was recorded"""
    if performance.total_volume > 0:
        return performance.total_volume
    return float(sum(s.weight * s.reps for s in performance.sets))
