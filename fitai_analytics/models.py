"""
Data Models
Immutable input records and computed result objects for the analytics engine.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AnalyticsModel(BaseModel):
    """Base for every value object: frozen, camelCase aliases"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Severity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ConstraintType(str, Enum):
    TIME = "time"
    EQUIPMENT = "equipment"
    INJURY = "injury"
    ENVIRONMENT = "environment"


class RiskType(str, Enum):
    VOLUME = "volume"
    INTENSITY = "intensity"
    FREQUENCY = "frequency"
    RECOVERY = "recovery"
    BIOMECHANICAL = "biomechanical"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class Periodization(str, Enum):
    LINEAR = "linear"
    UNDULATING = "undulating"
    BLOCK = "block"


class SlotPreference(str, Enum):
    PREFERRED = "preferred"
    ACCEPTABLE = "acceptable"
    LAST_RESORT = "last-resort"


class DayType(str, Enum):
    WORKOUT = "workout"
    REST = "rest"
    ACTIVE_RECOVERY = "active-recovery"


# ============================================
# Workout history
# ============================================

class SetPerformance(AnalyticsModel):
    reps: int = Field(gt=0)
    weight: float = Field(ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    rest_time: Optional[int] = Field(default=None, ge=0)  # seconds


class ExercisePerformance(AnalyticsModel):
    exercise_id: str
    name: str
    sets: List[SetPerformance] = Field(default_factory=list)
    total_volume: float = Field(default=0, ge=0)
    one_rep_max: Optional[float] = Field(default=None, ge=0)
    avg_rpe: Optional[float] = Field(default=None, ge=1, le=10)


class HeartRatePoint(AnalyticsModel):
    timestamp: datetime
    value: float = Field(ge=0)
    zone: str = ""


class WorkoutHistory(AnalyticsModel):
    """One completed training session"""

    id: str
    user_id: str
    date: datetime
    exercises: List[ExercisePerformance] = Field(default_factory=list)
    duration: float = Field(ge=0)  # minutes
    total_volume: float = Field(ge=0)  # weight x reps summed
    avg_rpe: float = Field(ge=1, le=10)
    heart_rate_data: Optional[List[HeartRatePoint]] = None
    recovery_score: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("date")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        # Naive dates are taken as UTC; aware ones are converted so all sessions compare
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class MovementPattern(AnalyticsModel):
    exercise_id: str
    consistency: float = Field(ge=0, le=1)
    technique_score: float = Field(default=0, ge=0, le=100)
    asymmetries: List[str] = Field(default_factory=list)
    improvement_trend: float = Field(default=0, ge=-1, le=1)


# ============================================
# User profile and catalog
# ============================================

class Constraint(AnalyticsModel):
    type: ConstraintType
    severity: Severity
    description: str = ""
    workarounds: List[str] = Field(default_factory=list)


class Injury(AnalyticsModel):
    location: str
    type: str = ""
    severity: str = "mild"  # mild, moderate, severe
    status: str = "active"  # active, recovering, healed
    restrictions: List[str] = Field(default_factory=list)


class PhysicalProfile(AnalyticsModel):
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    injuries: List[Injury] = Field(default_factory=list)
    limitations: List[str] = Field(default_factory=list)


class TimeSlot(AnalyticsModel):
    day: str
    start_time: str = Field(pattern=r"^([01]?\d|2[0-3]):[0-5]\d")  # HH:MM
    end_time: str = ""
    preference: SlotPreference = SlotPreference.ACCEPTABLE


class UserPreferences(AnalyticsModel):
    workout_duration: int = 60  # minutes
    preferred_intensity: Severity = Severity.MODERATE
    exercise_types: List[str] = Field(default_factory=list)
    equipment_preferences: List[str] = Field(default_factory=list)
    time_slots: List[TimeSlot] = Field(default_factory=list)
    rest_day_preferences: List[str] = Field(default_factory=list)


class PerformanceMetrics(AnalyticsModel):
    date: datetime
    volume: float = 0
    intensity: float = 0  # 0-10
    duration: float = 0
    fatigue: float = 0  # 0-10
    satisfaction: float = 0  # 0-10
    adherence: float = 0  # 0-1


class UserProfile(AnalyticsModel):
    id: str = ""
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    goals: List[str] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    physical_profile: PhysicalProfile = Field(default_factory=PhysicalProfile)
    constraints: List[Constraint] = Field(default_factory=list)
    performance_history: List[PerformanceMetrics] = Field(default_factory=list)


class Exercise(AnalyticsModel):
    """Read-only catalog entry"""

    id: str
    name: str
    category: str = ""
    muscle_groups: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    difficulty: float = Field(default=5, ge=1, le=10)
    compound: bool = False
    contraindications: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    form_cues: List[str] = Field(default_factory=list)


# ============================================
# Trend & plateau results
# ============================================

class LinearTrend(AnalyticsModel):
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0


class PlateauPrediction(AnalyticsModel):
    exercise_id: str
    exercise_name: str
    likelihood: float  # 0-1
    timeframe: int  # weeks until plateau
    current_trend: TrendDirection
    recommendations: List[str]
    confidence: float  # 0-1
    weeks_since_last_pr: float


class VolumeRecommendation(AnalyticsModel):
    user_id: str
    current_volume: float
    recommended_volume: int
    adjustment: float  # percentage change
    reasoning: str
    muscle_group_breakdown: Dict[str, int]
    periodization: Periodization
    recovery_score: float
    adaptation_rate: float
    volume_trend: LinearTrend


class TrainingStressPoint(AnalyticsModel):
    workout_id: str
    date: datetime
    stress_score: int
    moving_average: float


# ============================================
# Risk results
# ============================================

class RiskFactor(AnalyticsModel):
    type: RiskType
    severity: Severity
    description: str
    likelihood: float  # 0-1
    timeframe: str


class RiskAssessment(AnalyticsModel):
    overall_risk: Severity
    risk_factors: List[RiskFactor]
    preventive_actions: List[str]
    monitoring_points: List[str]
    confidence_score: float


# ============================================
# Workout prescription results
# ============================================

class ProgressionStep(AnalyticsModel):
    parameter: str  # weight, reps, sets, tempo, rest
    change: str
    condition: str


class ExerciseProgression(AnalyticsModel):
    current_level: int
    next_level: ProgressionStep
    timeframe: str
    markers: List[str]


class RecommendedExercise(AnalyticsModel):
    exercise: Exercise
    sets: int
    reps: str
    weight: str
    rest: int  # seconds
    rpe: str
    notes: List[str]
    progression: ExerciseProgression


class WorkoutAlternative(AnalyticsModel):
    reason: str
    modifications: List[str]


class WorkoutAdaptation(AnalyticsModel):
    trigger: str
    modification: str
    explanation: str


class WorkoutRecommendation(AnalyticsModel):
    id: str
    name: str
    description: str
    exercises: List[RecommendedExercise]
    estimated_duration: int  # minutes
    difficulty: int  # 1-10
    focus: List[str]
    reasoning: List[str]
    alternatives: List[WorkoutAlternative]
    adaptations: List[WorkoutAdaptation]


# ============================================
# Scheduling and deload results
# ============================================

class DayPlan(AnalyticsModel):
    day: str
    type: DayType
    reasoning: str
    time_slot: Optional[TimeSlot] = None


class IntensityDistribution(AnalyticsModel):
    low: float  # percentage
    moderate: float
    high: float


class WeeklyPlan(AnalyticsModel):
    days: List[DayPlan]
    total_volume: float
    intensity_distribution: IntensityDistribution
    recovery_score: float


class ScheduleAdaptation(AnalyticsModel):
    condition: str
    change: str
    implementation: str


class ScheduleRecommendation(AnalyticsModel):
    weekly_plan: WeeklyPlan
    reasoning: List[str]
    alternatives: List[WeeklyPlan]
    adaptations: List[ScheduleAdaptation]


class OptimalSchedule(AnalyticsModel):
    schedule: ScheduleRecommendation
    adherence_prediction: float
    success_factors: List[str]
    risk_factors: List[str]


class DeloadModification(AnalyticsModel):
    parameter: str  # volume, intensity, frequency
    reduction: int  # percentage
    explanation: str


class DeloadRecommendation(AnalyticsModel):
    timing: str
    duration: int  # days
    modifications: List[DeloadModification]
    activities: List[str]
    reasoning: List[str]
    average_fatigue: float
    fatigue_trend: TrendDirection
    severity: Severity
