"""
Analytics Router
API endpoints for trend, volume, risk and strength analysis
"""

from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import Field

from ..models import (
    AnalyticsModel,
    Exercise,
    MovementPattern,
    PlateauPrediction,
    RiskAssessment,
    SetPerformance,
    TrainingStressPoint,
    UserProfile,
    VolumeRecommendation,
    WorkoutHistory,
)
from ..services import (
    assess_injury_risk,
    calculate_1rm,
    calculate_optimal_volume,
    detect_training_plateaus,
    estimate_one_rep_max,
    training_stress_series,
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


class HistoryRequest(AnalyticsModel):
    user_id: str
    history: List[WorkoutHistory] = Field(default_factory=list)


class VolumeRequest(HistoryRequest):
    user_profile: Optional[UserProfile] = None
    catalog: List[Exercise] = Field(default_factory=list)


class InjuryRiskRequest(HistoryRequest):
    movement_patterns: List[MovementPattern] = Field(default_factory=list)


class StressRequest(HistoryRequest):
    window: int = Field(default=3, ge=1, le=28)


class OneRepMaxRequest(AnalyticsModel):
    sets: List[SetPerformance]


@router.post("/plateaus", response_model=List[PlateauPrediction])
async def predict_plateaus(request: HistoryRequest):
    """
    Predict which exercises are heading into a plateau.

    Needs at least 6 sessions for the user.
    """
    return detect_training_plateaus(request.user_id, request.history)


@router.post("/volume", response_model=VolumeRecommendation)
async def recommend_volume(request: VolumeRequest):
    """
    Recommend the next training volume.

    - **userProfile**: optional, its experience level scales the adjustment
    - **catalog**: optional, enables the per-muscle-group breakdown
    """
    return calculate_optimal_volume(
        request.user_id, request.history, request.user_profile, request.catalog
    )


@router.post("/injury-risk", response_model=RiskAssessment)
async def injury_risk(request: InjuryRiskRequest):
    return assess_injury_risk(request.user_id, request.history, request.movement_patterns)


@router.post("/stress", response_model=List[TrainingStressPoint])
async def training_stress(request: StressRequest):
    """Training stress score per session, with a trailing moving average"""
    return training_stress_series(request.user_id, request.history, request.window)


@router.post("/1rm")
async def estimate_from_sets(request: OneRepMaxRequest):
    """Estimate 1RM from logged sets (only sets of 1-10 reps count)"""
    return {
        "estimatedOneRepMax": estimate_one_rep_max(request.sets),
        "setsUsed": sum(1 for s in request.sets if s.reps <= 10),
    }


@router.get("/1rm/calculate")
async def calculate_one_rep_max(
    weight: float = Query(..., gt=0),
    reps: int = Query(..., ge=1, le=30),
    formula: str = Query(default="average", pattern="^(epley|brzycki|lombardi|average)$")
):
    """
    Calculate estimated 1RM using various formulas.

    - **weight**: Weight lifted
    - **reps**: Number of reps completed
    - **formula**: Formula to use (epley, brzycki, lombardi, average)
    """
    if reps == 1:
        return {
            "weight": weight,
            "reps": reps,
            "estimated1rm": weight,
            "note": "1 rep = actual 1RM"
        }

    all_formulas = {
        name: round(calculate_1rm(weight, reps, name), 1)
        for name in ('epley', 'brzycki', 'lombardi')
    }

    return {
        "weight": weight,
        "reps": reps,
        "formula": formula,
        "estimated1rm": round(calculate_1rm(weight, reps, formula), 1),
        "allFormulas": all_formulas
    }
