"""
Training Recommendations Service
Provides exercise substitutions, workout prescriptions and deload advice

CONCEPTS DEMONSTRATED:
1. Rule-based Systems - Encoding domain knowledge in lookup tables
2. Similarity Ranking - Scoring catalog entries against an exercise
3. Balancing Multiple Factors - Goals, experience, constraints and time
"""

import uuid
from typing import List, Sequence

import structlog

from ..models import (
    Constraint,
    ConstraintType,
    DeloadModification,
    DeloadRecommendation,
    Exercise,
    ExerciseProgression,
    ExperienceLevel,
    PerformanceMetrics,
    ProgressionStep,
    RecommendedExercise,
    Severity,
    TrendDirection,
    UserProfile,
    WorkoutAdaptation,
    WorkoutAlternative,
    WorkoutRecommendation,
)
from .stats import mean

logger = structlog.get_logger(__name__)

MAX_SUBSTITUTIONS = 5
MAX_WORKOUT_EXERCISES = 6
MAX_EXERCISE_NOTES = 3

WARM_UP_MINUTES = 10
COOL_DOWN_MINUTES = 10
SECONDS_PER_SET = 30

# Penalty applied to a candidate's suitability for each active constraint
CONSTRAINT_PENALTIES = {
    Severity.HIGH: 0.3,
    Severity.MODERATE: 0.2,
    Severity.LOW: 0.1,
}

# Catalog difficulty that best matches each experience level
TARGET_DIFFICULTY = {
    ExperienceLevel.BEGINNER: 3,
    ExperienceLevel.INTERMEDIATE: 5,
    ExperienceLevel.ADVANCED: 7,
}

DIFFICULTY_SCALING = {
    ExperienceLevel.BEGINNER: 0.8,
    ExperienceLevel.INTERMEDIATE: 1.0,
    ExperienceLevel.ADVANCED: 1.2,
}

DELOAD_TIMING = {
    Severity.HIGH: "Inmediato",
    Severity.MODERATE: "Próxima semana",
    Severity.LOW: "En 2-3 semanas",
}

DELOAD_DURATION_DAYS = {
    Severity.HIGH: 7,
    Severity.MODERATE: 5,
    Severity.LOW: 3,
}

DELOAD_ACTIVITIES = [
    "Caminatas ligeras (20-30 minutos)",
    "Yoga o stretching suave",
    "Natación a ritmo relajado",
    "Trabajo de movilidad y flexibilidad",
    "Masaje o técnicas de recuperación",
]


# ============================================
# Exercise substitutions
# ============================================

def _mentions(descriptions: List[str], terms: Sequence[str]) -> bool:
    """True when any non-blank term appears inside any constraint description"""
    return any(
        term.strip() and term.strip().lower() in description
        for term in terms for description in descriptions
    )


def is_allowed(exercise: Exercise, constraints: Sequence[Constraint]) -> bool:
    """
    Check an exercise against equipment and injury constraints.

    An exercise is excluded when one of its equipment items is named in an
    equipment constraint, or one of its contraindications is named in an
    injury constraint.
    """
    equipment_limits = [c.description.lower() for c in constraints
                        if c.type == ConstraintType.EQUIPMENT]
    injuries = [c.description.lower() for c in constraints
                if c.type == ConstraintType.INJURY]

    if equipment_limits and _mentions(equipment_limits, exercise.equipment):
        return False
    if injuries and _mentions(injuries, exercise.contraindications):
        return False
    return True


def calculate_exercise_similarity(original: Exercise, candidate: Exercise) -> float:
    """Weighted match on muscle groups, category, movement type and difficulty"""
    similarity = 0.0

    largest_group_count = max(len(original.muscle_groups), len(candidate.muscle_groups))
    if largest_group_count:
        overlap = len(set(original.muscle_groups) & set(candidate.muscle_groups))
        similarity += overlap / largest_group_count * 0.4

    if original.category == candidate.category:
        similarity += 0.2

    if original.compound == candidate.compound:
        similarity += 0.2

    difficulty_gap = abs(original.difficulty - candidate.difficulty)
    similarity += (1 - difficulty_gap / 10) * 0.2

    return similarity


def calculate_exercise_suitability(constraints: Sequence[Constraint]) -> float:
    penalty = sum(CONSTRAINT_PENALTIES.get(c.severity, 0.1) for c in constraints)
    return max(0.0, 1.0 - penalty)


def generate_exercise_substitutions(
    original_exercise: Exercise,
    catalog: Sequence[Exercise],
    constraints: Sequence[Constraint] = (),
) -> List[Exercise]:
    """
    Find up to 5 alternatives for an exercise.

    Args:
        original_exercise: The exercise to replace
        catalog: Exercises to choose from
        constraints: User constraints; equipment and injury ones filter the
            candidates, all of them lower suitability

    Returns:
        Candidates sharing at least one muscle group, best match first
    """
    target_groups = set(original_exercise.muscle_groups)
    suitability = calculate_exercise_suitability(constraints)

    candidates = [
        exercise for exercise in catalog
        if exercise.id != original_exercise.id
        and target_groups.intersection(exercise.muscle_groups)
        and is_allowed(exercise, constraints)
    ]

    ranked = sorted(
        candidates,
        key=lambda exercise: calculate_exercise_similarity(original_exercise, exercise) + suitability,
        reverse=True,
    )

    logger.debug("substitutions_ranked", exercise_id=original_exercise.id,
                 candidates=len(candidates))
    return ranked[:MAX_SUBSTITUTIONS]


# ============================================
# Workout prescription
# ============================================

def select_exercises(user_profile: UserProfile, catalog: Sequence[Exercise]) -> List[Exercise]:
    """
    Pick the exercises for a session.

    Compound movements come first, then the ones closest to the difficulty
    that suits the user's level. Exercises that cover a muscle group not yet
    trained in the session are taken before repeats.
    """
    target = TARGET_DIFFICULTY[user_profile.experience_level]
    allowed = [e for e in catalog if is_allowed(e, user_profile.constraints)]

    ordered = sorted(allowed, key=lambda e: (not e.compound, abs(e.difficulty - target)))

    selected: List[Exercise] = []
    covered = set()

    for exercise in ordered:
        if len(selected) >= MAX_WORKOUT_EXERCISES:
            break
        if set(exercise.muscle_groups) - covered:
            selected.append(exercise)
            covered.update(exercise.muscle_groups)

    for exercise in ordered:
        if len(selected) >= MAX_WORKOUT_EXERCISES:
            break
        if exercise not in selected:
            selected.append(exercise)

    return selected


def calculate_optimal_sets(user_profile: UserProfile) -> int:
    if user_profile.experience_level == ExperienceLevel.BEGINNER:
        return 2
    return 3


def calculate_optimal_reps(user_profile: UserProfile) -> str:
    if 'strength' in user_profile.goals:
        return '3-5'
    if 'hypertrophy' in user_profile.goals:
        return '8-12'
    return '6-10'


def calculate_rest_time(exercise: Exercise, user_profile: UserProfile) -> int:
    if exercise.compound and 'strength' in user_profile.goals:
        return 180
    if exercise.compound:
        return 120
    return 90


def calculate_target_rpe(user_profile: UserProfile) -> str:
    if user_profile.experience_level == ExperienceLevel.BEGINNER:
        return '6-7'
    if 'strength' in user_profile.goals:
        return '8-9'
    return '7-8'


def _exercise_notes(exercise: Exercise, user_profile: UserProfile) -> List[str]:
    notes = list(exercise.form_cues)
    if user_profile.experience_level == ExperienceLevel.BEGINNER:
        notes.append("Enfócate en la técnica correcta antes que en el peso")
    return notes[:MAX_EXERCISE_NOTES]


def _exercise_progression() -> ExerciseProgression:
    return ExerciseProgression(
        current_level=1,
        next_level=ProgressionStep(
            parameter='weight',
            change='+2.5kg',
            condition='Completa todas las series con RPE<8',
        ),
        timeframe='2-3 semanas',
        markers=['Técnica consistente', 'Sin dolor o molestias'],
    )


def prescribe_exercise(exercise: Exercise, user_profile: UserProfile) -> RecommendedExercise:
    return RecommendedExercise(
        exercise=exercise,
        sets=calculate_optimal_sets(user_profile),
        reps=calculate_optimal_reps(user_profile),
        weight="Peso que permita completar todas las repeticiones con RPE objetivo",
        rest=calculate_rest_time(exercise, user_profile),
        rpe=calculate_target_rpe(user_profile),
        notes=_exercise_notes(exercise, user_profile),
        progression=_exercise_progression(),
    )


def calculate_workout_duration(exercises: Sequence[RecommendedExercise]) -> int:
    """Warm-up + 30s of work and the prescribed rest per set + cool-down, in minutes"""
    duration = WARM_UP_MINUTES
    for prescribed in exercises:
        duration += prescribed.sets * (SECONDS_PER_SET + prescribed.rest) / 60
    duration += COOL_DOWN_MINUTES
    return int(round(duration))


def calculate_workout_difficulty(
    exercises: Sequence[RecommendedExercise],
    user_profile: UserProfile,
) -> int:
    if not exercises:
        return 1

    avg_difficulty = mean(e.exercise.difficulty for e in exercises)
    adjusted = avg_difficulty * DIFFICULTY_SCALING[user_profile.experience_level]
    return int(round(max(1, min(10, adjusted))))


def _workout_name(goals: List[str], exercises: Sequence[RecommendedExercise]) -> str:
    if 'strength' in goals and any(e.exercise.compound for e in exercises):
        return "Entrenamiento de Fuerza - Movimientos Compuestos"
    if 'hypertrophy' in goals:
        return "Entrenamiento de Hipertrofia - Volumen Optimizado"
    return "Entrenamiento Personalizado"


def _workout_description(user_profile: UserProfile, exercises: Sequence[RecommendedExercise]) -> str:
    compound_count = sum(1 for e in exercises if e.exercise.compound)
    isolation_count = len(exercises) - compound_count
    return (
        f"Entrenamiento adaptado para {user_profile.experience_level.value} con "
        f"{compound_count} ejercicios compuestos y {isolation_count} de aislamiento. "
        f"Enfoque en {' y '.join(user_profile.goals)}."
    )


def _workout_reasoning(user_profile: UserProfile, exercises: Sequence[RecommendedExercise]) -> List[str]:
    reasoning = [
        f"Entrenamiento diseñado para tu nivel: {user_profile.experience_level.value}",
        f"Enfocado en tus objetivos: {', '.join(user_profile.goals)}",
        "Duración optimizada según tu disponibilidad",
    ]
    if any(e.exercise.compound for e in exercises):
        reasoning.append("Incluye ejercicios compuestos para máxima eficiencia")
    return reasoning


def _workout_focus(exercises: Sequence[RecommendedExercise]) -> List[str]:
    focus: List[str] = []
    for prescribed in exercises:
        for muscle in prescribed.exercise.muscle_groups:
            if muscle not in focus:
                focus.append(muscle)
    return focus


WORKOUT_ALTERNATIVES = [
    WorkoutAlternative(
        reason="Si tienes menos tiempo disponible",
        modifications=["Reducir descansos a 60 segundos", "Eliminar último ejercicio accesorio"],
    ),
    WorkoutAlternative(
        reason="Si no tienes acceso a todo el equipamiento",
        modifications=["Usar ejercicios con peso corporal",
                       "Sustituir con ejercicios de equipamiento disponible"],
    ),
]

WORKOUT_ADAPTATIONS = [
    WorkoutAdaptation(
        trigger="Fatiga excesiva (RPE >9)",
        modification="Reducir peso en 10-20%",
        explanation="Priorizar técnica y volumen sobre intensidad",
    ),
    WorkoutAdaptation(
        trigger="Dolor o molestia",
        modification="Suspender ejercicio y sustituir",
        explanation="La seguridad es prioritaria sobre el progreso",
    ),
]


def generate_workout_recommendation(
    user_profile: UserProfile,
    catalog: Sequence[Exercise],
) -> WorkoutRecommendation:
    """
    Build a complete session for a user from the exercise catalog.

    Exercises are trimmed from the end while the estimated duration exceeds
    the user's preferred session length.
    """
    prescribed = [prescribe_exercise(e, user_profile) for e in select_exercises(user_profile, catalog)]

    while len(prescribed) > 1 and calculate_workout_duration(prescribed) > user_profile.preferences.workout_duration:
        prescribed.pop()

    exercise_ids = ",".join(p.exercise.id for p in prescribed)
    workout_id = uuid.uuid5(uuid.NAMESPACE_URL, f"fitai:{user_profile.id}:{exercise_ids}")

    logger.debug("workout_recommended", user_id=user_profile.id, exercises=len(prescribed))

    return WorkoutRecommendation(
        id=f"workout_{workout_id.hex[:12]}",
        name=_workout_name(user_profile.goals, prescribed),
        description=_workout_description(user_profile, prescribed),
        exercises=prescribed,
        estimated_duration=calculate_workout_duration(prescribed),
        difficulty=calculate_workout_difficulty(prescribed, user_profile),
        focus=_workout_focus(prescribed),
        reasoning=_workout_reasoning(user_profile, prescribed),
        alternatives=list(WORKOUT_ALTERNATIVES),
        adaptations=list(WORKOUT_ADAPTATIONS),
    )


# ============================================
# Deload
# ============================================

def fatigue_trend(values: Sequence[float]) -> TrendDirection:
    """Direction of change between the first and last value (10% threshold)"""
    if len(values) < 2 or values[0] == 0:
        return TrendDirection.STABLE

    change = (values[-1] - values[0]) / values[0]
    if change > 0.1:
        return TrendDirection.INCREASING
    if change < -0.1:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def classify_fatigue(avg_fatigue: float) -> Severity:
    if avg_fatigue > 7:
        return Severity.HIGH
    if avg_fatigue > 5:
        return Severity.MODERATE
    return Severity.LOW


def _deload_modifications(severity: Severity) -> List[DeloadModification]:
    if severity == Severity.HIGH:
        return [
            DeloadModification(
                parameter='volume',
                reduction=50,
                explanation="Reducir volumen significativamente para permitir recuperación completa",
            ),
            DeloadModification(
                parameter='intensity',
                reduction=30,
                explanation="Bajar intensidad para reducir estrés del sistema nervioso",
            ),
        ]
    return [
        DeloadModification(
            parameter='volume',
            reduction=30,
            explanation="Reducción moderada de volumen manteniendo patrones de movimiento",
        ),
    ]


def recommend_deload_week(fatigue_markers: Sequence[PerformanceMetrics]) -> DeloadRecommendation:
    """
    Plan a deload from recent fatigue ratings.

    Average fatigue above 7 calls for an immediate week-long deload, above 5
    for a shorter one next week, anything else for a light one in 2-3 weeks.
    """
    fatigue_values = [m.fatigue for m in fatigue_markers]
    avg_fatigue = mean(fatigue_values)
    severity = classify_fatigue(avg_fatigue)

    return DeloadRecommendation(
        timing=DELOAD_TIMING[severity],
        duration=DELOAD_DURATION_DAYS[severity],
        modifications=_deload_modifications(severity),
        activities=list(DELOAD_ACTIVITIES),
        reasoning=[
            "Indicadores de fatiga acumulada detectados",
            "Descarga programada para optimizar recuperación",
            "Mantenimiento de patrón de movimiento sin sobrecarga",
        ],
        average_fatigue=round(avg_fatigue, 2),
        fatigue_trend=fatigue_trend(fatigue_values),
        severity=severity,
    )
