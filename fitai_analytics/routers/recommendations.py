"""
Recommendations Router
API endpoints for exercise, workout, deload and scheduling recommendations
"""

from typing import List

from fastapi import APIRouter
from pydantic import Field

from ..models import (
    AnalyticsModel,
    Constraint,
    DeloadRecommendation,
    Exercise,
    OptimalSchedule,
    PerformanceMetrics,
    TimeSlot,
    UserProfile,
    WorkoutRecommendation,
)
from ..services import (
    generate_exercise_substitutions,
    generate_workout_recommendation,
    optimize_workout_timing,
    recommend_deload_week,
)

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


class SubstitutionRequest(AnalyticsModel):
    original_exercise: Exercise
    catalog: List[Exercise] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)


class WorkoutRequest(AnalyticsModel):
    user_profile: UserProfile
    catalog: List[Exercise] = Field(default_factory=list)


class DeloadRequest(AnalyticsModel):
    fatigue_markers: List[PerformanceMetrics] = Field(default_factory=list)


class TimingRequest(AnalyticsModel):
    schedule: List[TimeSlot] = Field(default_factory=list)
    performance_data: List[PerformanceMetrics] = Field(default_factory=list)


@router.post("/substitutions", response_model=List[Exercise])
async def get_substitutions(request: SubstitutionRequest):
    """
    Get up to 5 alternatives for an exercise.

    Every alternative works at least one of the same muscle groups and
    respects the user's equipment and injury constraints.
    """
    return generate_exercise_substitutions(
        request.original_exercise, request.catalog, request.constraints
    )


@router.post("/workout", response_model=WorkoutRecommendation)
async def get_workout_recommendation(request: WorkoutRequest):
    """
    Get a complete workout for the user.

    Exercises, sets, reps, rest and RPE are chosen from the user's goals,
    experience level and preferred session length.
    """
    return generate_workout_recommendation(request.user_profile, request.catalog)


@router.post("/deload", response_model=DeloadRecommendation)
async def get_deload_recommendation(request: DeloadRequest):
    """
    Get deload timing and modifications from recent fatigue ratings.

    Deloads are recommended when:
    - Average fatigue is above 7 (immediate, 7 days)
    - Average fatigue is above 5 (next week, 5 days)
    - Otherwise a light deload is planned in 2-3 weeks
    """
    return recommend_deload_week(request.fatigue_markers)


@router.post("/timing", response_model=OptimalSchedule)
async def get_workout_timing(request: TimingRequest):
    return optimize_workout_timing(request.schedule, request.performance_data)
