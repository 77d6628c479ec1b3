"""
Analytics Services Package

Contains the core analysis logic:
- Trend analysis: plateau prediction and volume recommendation
- Strength: 1RM estimation and training stress
- Risk assessment: injury risk from load and movement quality
- Recommender: substitutions, workout prescription, deloads
- Scheduler: workout timing and weekly plans
- Routine contract: model selection and routine normalization
"""

from .trend_analyzer import calculate_optimal_volume, detect_training_plateaus
from .strength import (
    calculate_1rm,
    calculate_training_stress_score,
    estimate_one_rep_max,
    training_stress_series,
)
from .risk_assessor import assess_injury_risk
from .recommender import (
    generate_exercise_substitutions,
    generate_workout_recommendation,
    recommend_deload_week,
)
from .scheduler import optimize_workout_timing
from .routine_contract import (
    SubscriptionPlan,
    calculate_usage_cost,
    select_model,
    validate_generated_routine,
)

__all__ = [
    'detect_training_plateaus',
    'calculate_optimal_volume',
    'calculate_1rm',
    'estimate_one_rep_max',
    'calculate_training_stress_score',
    'training_stress_series',
    'assess_injury_risk',
    'generate_exercise_substitutions',
    'generate_workout_recommendation',
    'recommend_deload_week',
    'optimize_workout_timing',
    'SubscriptionPlan',
    'select_model',
    'calculate_usage_cost',
    'validate_generated_routine',
]
