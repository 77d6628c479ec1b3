"""
Injury Risk Service
Combines independent risk detectors into an overall injury risk rating

CONCEPTS DEMONSTRATED:
1. Independent Detectors - each signal contributes at most one factor
2. Aggregation - severity and mean likelihood drive the overall rating
3. Rule-based Advice - actions keyed by which risks are present
"""

from typing import List, Optional, Sequence

import structlog

from ..models import (
    MovementPattern,
    RiskAssessment,
    RiskFactor,
    RiskType,
    Severity,
    WorkoutHistory,
)
from .history import user_sessions
from .stats import calculate_trend, mean
from .trend_analyzer import calculate_recovery_score

logger = structlog.get_logger(__name__)

MIN_RISK_SESSIONS = 3
VOLUME_RISK_WINDOW = 4
VOLUME_SPIKE_SLOPE = 0.3
HIGH_RPE = 8.5
HIGH_INTENSITY_SHARE = 0.6
POOR_RECOVERY = 0.3
MIN_CONSISTENCY = 0.6

# Full confidence is reached at this many sessions
CONFIDENCE_SESSIONS = 12

PREVENTIVE_ACTIONS = {
    RiskType.VOLUME: [
        "Programa una semana de descarga inmediata",
        "Reduce volumen semanal en 20-30%",
    ],
    RiskType.INTENSITY: [
        "Incluye más entrenamientos de intensidad moderada (RPE 6-7)",
        "Limita entrenamientos de alta intensidad a 2 por semana",
    ],
    RiskType.RECOVERY: [
        "Prioriza sueño de calidad (7-9 horas)",
        "Incorpora técnicas de recuperación activa",
        "Considera suplementación para recuperación",
    ],
    RiskType.BIOMECHANICAL: [
        "Reduce la carga en los ejercicios señalados hasta estabilizar la técnica",
        "Añade trabajo unilateral para corregir asimetrías",
    ],
}

BASE_MONITORING_POINTS = [
    "Niveles de fatiga subjetiva (RPE)",
    "Calidad del sueño",
    "Dolor o molestias articulares",
    "Motivación para entrenar",
    "Variabilidad de frecuencia cardíaca",
]

EXTRA_MONITORING_POINTS = {
    RiskType.VOLUME: "Incremento semanal de volumen total",
    RiskType.INTENSITY: "Número de sesiones con RPE superior a 8.5",
    RiskType.RECOVERY: "Puntuación de recuperación entre sesiones",
    RiskType.BIOMECHANICAL: "Técnica y simetría en los ejercicios señalados",
}


def assess_injury_risk(
    user_id: str,
    history: Sequence[WorkoutHistory],
    movement_patterns: Sequence[MovementPattern] = (),
) -> RiskAssessment:
    """
    Assess injury risk from training load and movement quality.

    With fewer than 3 sessions a conservative low-risk result is returned
    instead of an error, so the assessment never blocks usage.
    """
    sessions = user_sessions(user_id, history)

    if len(sessions) < MIN_RISK_SESSIONS:
        return RiskAssessment(
            overall_risk=Severity.LOW,
            risk_factors=[],
            preventive_actions=["Complete más entrenamientos para análisis completo"],
            monitoring_points=["Consistencia en la técnica", "Progresión gradual"],
            confidence_score=0.3,
        )

    risk_factors: List[RiskFactor] = []

    for detector in (assess_volume_risk, assess_intensity_risk, assess_recovery_risk):
        factor = detector(sessions)
        if factor is not None:
            risk_factors.append(factor)

    risk_factors.extend(assess_movement_pattern_risks(movement_patterns))

    overall_risk = calculate_overall_risk(risk_factors)

    logger.debug("injury_risk_assessed", user_id=user_id,
                 overall_risk=overall_risk.value, factors=len(risk_factors))

    return RiskAssessment(
        overall_risk=overall_risk,
        risk_factors=risk_factors,
        preventive_actions=generate_preventive_actions(risk_factors),
        monitoring_points=generate_monitoring_points(risk_factors),
        confidence_score=calculate_confidence_score(len(sessions), len(risk_factors)),
    )


# ============================================
# Detectors
# ============================================

def assess_volume_risk(sessions: Sequence[WorkoutHistory]) -> Optional[RiskFactor]:
    """Rapid volume increase over the last 4 sessions"""
    recent_volumes = [w.total_volume for w in sessions[-VOLUME_RISK_WINDOW:]]
    trend = calculate_trend(recent_volumes)

    if trend.slope > VOLUME_SPIKE_SLOPE:
        return RiskFactor(
            type=RiskType.VOLUME,
            severity=Severity.HIGH,
            description="Incremento rápido de volumen de entrenamiento",
            likelihood=0.7,
            timeframe="2-4 semanas",
        )
    return None


def assess_intensity_risk(sessions: Sequence[WorkoutHistory]) -> Optional[RiskFactor]:
    """Most sessions performed near maximal effort"""
    if not sessions:
        return None

    high_intensity = sum(1 for w in sessions if w.avg_rpe > HIGH_RPE)

    if high_intensity / len(sessions) > HIGH_INTENSITY_SHARE:
        return RiskFactor(
            type=RiskType.INTENSITY,
            severity=Severity.MODERATE,
            description="Alta frecuencia de entrenamientos de alta intensidad",
            likelihood=0.5,
            timeframe="3-6 semanas",
        )
    return None


def assess_recovery_risk(sessions: Sequence[WorkoutHistory]) -> Optional[RiskFactor]:
    if calculate_recovery_score(sessions) < POOR_RECOVERY:
        return RiskFactor(
            type=RiskType.RECOVERY,
            severity=Severity.HIGH,
            description="Recuperación consistentemente deficiente",
            likelihood=0.8,
            timeframe="1-2 semanas",
        )
    return None


def assess_movement_pattern_risks(patterns: Sequence[MovementPattern]) -> List[RiskFactor]:
    """One factor per inconsistent pattern and one per pattern with asymmetries"""
    risks = []

    for pattern in patterns:
        if pattern.consistency < MIN_CONSISTENCY:
            risks.append(RiskFactor(
                type=RiskType.BIOMECHANICAL,
                severity=Severity.MODERATE,
                description=f"Inconsistencia en la técnica: {pattern.exercise_id}",
                likelihood=0.4,
                timeframe="4-8 semanas",
            ))

        if pattern.asymmetries:
            risks.append(RiskFactor(
                type=RiskType.BIOMECHANICAL,
                severity=Severity.MODERATE,
                description=f"Asimetrías detectadas: {', '.join(pattern.asymmetries)}",
                likelihood=0.6,
                timeframe="6-12 semanas",
            ))

    return risks


# ============================================
# Aggregation
# ============================================

def calculate_overall_risk(risk_factors: Sequence[RiskFactor]) -> Severity:
    if not risk_factors:
        return Severity.LOW

    avg_likelihood = mean(rf.likelihood for rf in risk_factors)
    has_high_severity = any(rf.severity == Severity.HIGH for rf in risk_factors)

    if has_high_severity or avg_likelihood > 0.7:
        return Severity.HIGH
    if avg_likelihood > 0.4:
        return Severity.MODERATE
    return Severity.LOW


def _present_types(risk_factors: Sequence[RiskFactor]) -> List[RiskType]:
    present = {rf.type for rf in risk_factors}
    # Keep a fixed order so the advice lists are deterministic
    return [risk_type for risk_type in RiskType if risk_type in present]


def generate_preventive_actions(risk_factors: Sequence[RiskFactor]) -> List[str]:
    actions = []
    for risk_type in _present_types(risk_factors):
        actions.extend(PREVENTIVE_ACTIONS.get(risk_type, []))

    return actions or ["Mantener patrón actual de entrenamiento"]


def generate_monitoring_points(risk_factors: Sequence[RiskFactor]) -> List[str]:
    points = list(BASE_MONITORING_POINTS)
    for risk_type in _present_types(risk_factors):
        if risk_type in EXTRA_MONITORING_POINTS:
            points.append(EXTRA_MONITORING_POINTS[risk_type])
    return points


def calculate_confidence_score(session_count: int, risk_factor_count: int) -> float:
    data_confidence = min(session_count / CONFIDENCE_SESSIONS, 1)
    analysis_confidence = 0.8 if risk_factor_count > 0 else 0.6
    return round(data_confidence * analysis_confidence * 100) / 100
