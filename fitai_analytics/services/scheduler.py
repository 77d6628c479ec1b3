"""
Workout Timing Service
Ranks the user's available time slots and lays out a training week
"""

from typing import Dict, List, Optional, Sequence

import pandas as pd
import structlog

from ..models import (
    DayPlan,
    DayType,
    IntensityDistribution,
    OptimalSchedule,
    PerformanceMetrics,
    ScheduleAdaptation,
    ScheduleRecommendation,
    SlotPreference,
    TimeSlot,
    WeeklyPlan,
)
from .stats import mean

logger = structlog.get_logger(__name__)

WEEK_DAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']

SPANISH_DAYS = {
    'lunes': 'Monday',
    'martes': 'Tuesday',
    'miercoles': 'Wednesday',
    'miércoles': 'Wednesday',
    'jueves': 'Thursday',
    'viernes': 'Friday',
    'sabado': 'Saturday',
    'sábado': 'Saturday',
    'domingo': 'Sunday',
}

TIME_BUCKETS = ['morning', 'afternoon', 'evening']

# Used when the user has no performance history at all
DEFAULT_TIME_PERFORMANCE = {
    'morning': 0.85,
    'afternoon': 0.75,
    'evening': 0.90,
}
UNKNOWN_BUCKET_SCORE = 0.5

MAX_WORKOUT_DAYS = 3
DEFAULT_WORKOUT_DAYS = ['Monday', 'Wednesday', 'Friday']
DEFAULT_INTENSITY = IntensityDistribution(low=30, moderate=50, high=20)
DEFAULT_RECOVERY_SCORE = 0.8

SCHEDULE_REASONING = [
    "Horarios optimizados basados en tu rendimiento histórico",
    "Balance entre intensidad y recuperación",
    "Adaptado a tu disponibilidad personal",
]

SCHEDULE_ADAPTATIONS = [
    ScheduleAdaptation(
        condition="Si tienes poco tiempo",
        change="Reduce duración del entrenamiento en 25%",
        implementation="Elimina ejercicios accesorios y enfócate en compuestos",
    ),
    ScheduleAdaptation(
        condition="Si te sientes fatigado",
        change="Reduce intensidad en 20%",
        implementation="Usa RPE más bajo y añade descansos extra",
    ),
]


def bucket_for_hour(hour: int) -> str:
    if hour < 12:
        return 'morning'
    if hour < 17:
        return 'afternoon'
    return 'evening'


def time_of_day(time: str) -> str:
    """Bucket an HH:MM clock time into morning, afternoon or evening"""
    return bucket_for_hour(int(time.split(':')[0]))


def normalize_day(day: str) -> Optional[str]:
    name = day.strip().lower()
    if name in SPANISH_DAYS:
        return SPANISH_DAYS[name]
    name = name.capitalize()
    return name if name in WEEK_DAYS else None


def analyze_time_performance(performance_data: Sequence[PerformanceMetrics]) -> Dict[str, float]:
    """
    Mean satisfaction (scaled to 0-1) of the sessions in each part of the day.

    Parts of the day with no recorded sessions score 0.5.
    """
    if not performance_data:
        return dict(DEFAULT_TIME_PERFORMANCE)

    frame = pd.DataFrame({
        'hour': [m.date.hour for m in performance_data],
        'satisfaction': [m.satisfaction for m in performance_data],
    })
    frame['time_of_day'] = frame['hour'].map(bucket_for_hour)
    scores = frame.groupby('time_of_day')['satisfaction'].mean() / 10

    performance = {}
    for bucket in TIME_BUCKETS:
        if bucket in scores.index:
            performance[bucket] = round(min(1.0, max(0.0, float(scores[bucket]))), 3)
        else:
            performance[bucket] = UNKNOWN_BUCKET_SCORE
    return performance


def find_optimal_workout_times(
    schedule: Sequence[TimeSlot],
    performance_map: Dict[str, float],
) -> List[TimeSlot]:
    """Usable slots (no last-resort ones), best part of the day first"""
    usable = [slot for slot in schedule if slot.preference != SlotPreference.LAST_RESORT]
    return sorted(
        usable,
        key=lambda slot: performance_map.get(time_of_day(slot.start_time), UNKNOWN_BUCKET_SCORE),
        reverse=True,
    )


def _distinct_day_slots(slots: Sequence[TimeSlot]) -> Dict[str, TimeSlot]:
    """First (best ranked) slot of each weekday, in ranking order"""
    by_day: Dict[str, TimeSlot] = {}
    for slot in slots:
        day = normalize_day(slot.day)
        if day is not None and day not in by_day:
            by_day[day] = slot
    return by_day


def _intensity_distribution(performance_data: Sequence[PerformanceMetrics]) -> IntensityDistribution:
    if not performance_data:
        return DEFAULT_INTENSITY

    total = len(performance_data)
    low = sum(1 for m in performance_data if m.intensity < 5)
    high = sum(1 for m in performance_data if m.intensity > 7.5)
    moderate = total - low - high

    return IntensityDistribution(
        low=round(low / total * 100, 1),
        moderate=round(moderate / total * 100, 1),
        high=round(high / total * 100, 1),
    )


def generate_weekly_plan(
    workout_slots: Dict[str, Optional[TimeSlot]],
    performance_data: Sequence[PerformanceMetrics],
) -> WeeklyPlan:
    """
    Lay out Monday-Sunday around the chosen workout days.

    A free day directly between two workout days becomes active recovery,
    every other free day is rest.
    """
    workout_indexes = {WEEK_DAYS.index(day) for day in workout_slots}
    days = []

    for index, day in enumerate(WEEK_DAYS):
        if index in workout_indexes:
            slot = workout_slots[day]
            reasoning = (
                f"Sesión a las {slot.start_time}, tu franja de mejor rendimiento"
                if slot is not None else "Sesión en un día estándar de entrenamiento"
            )
            days.append(DayPlan(day=day, type=DayType.WORKOUT, reasoning=reasoning, time_slot=slot))
        elif index - 1 in workout_indexes and index + 1 in workout_indexes:
            days.append(DayPlan(day=day, type=DayType.ACTIVE_RECOVERY,
                                reasoning="Movimiento ligero entre dos sesiones"))
        else:
            days.append(DayPlan(day=day, type=DayType.REST,
                                reasoning="Día de descanso para recuperación"))

    if performance_data:
        total_volume = round(mean(m.volume for m in performance_data) * len(workout_slots), 2)
        recovery_score = round(min(1.0, max(0.0, 1 - mean(m.fatigue for m in performance_data) / 10)), 2)
    else:
        total_volume = 0.0
        recovery_score = DEFAULT_RECOVERY_SCORE

    return WeeklyPlan(
        days=days,
        total_volume=total_volume,
        intensity_distribution=_intensity_distribution(performance_data),
        recovery_score=recovery_score,
    )


def predict_adherence(
    usable_slots: Sequence[TimeSlot],
    performance_data: Sequence[PerformanceMetrics],
) -> float:
    """
    Expected share of planned sessions the user will complete.

    Rises with the share of preferred slots and the number of usable slots;
    blended 50/50 with recorded adherence when there is any.
    """
    if usable_slots:
        preferred = sum(1 for s in usable_slots if s.preference == SlotPreference.PREFERRED)
        prediction = min(
            0.95,
            0.5 + 0.3 * preferred / len(usable_slots) + 0.15 * min(len(usable_slots) / 3, 1),
        )
    else:
        prediction = 0.5

    if performance_data:
        prediction = (prediction + mean(m.adherence for m in performance_data)) / 2

    return round(prediction, 2)


def _has_consecutive_days(plan: WeeklyPlan) -> bool:
    types = [d.type for d in plan.days]
    return any(
        a == DayType.WORKOUT and b == DayType.WORKOUT
        for a, b in zip(types, types[1:])
    )


def identify_success_factors(plan: WeeklyPlan, workout_slots: Dict[str, Optional[TimeSlot]]) -> List[str]:
    factors = []
    if any(s is not None and s.preference == SlotPreference.PREFERRED for s in workout_slots.values()):
        factors.append("Horarios alineados con tu mejor rendimiento")
    if plan.intensity_distribution.high <= 30:
        factors.append("Distribución equilibrada de intensidad")
    if not _has_consecutive_days(plan):
        factors.append("Días de descanso estratégicamente ubicados")
    return factors


def identify_risk_factors(plan: WeeklyPlan, usable_day_count: int) -> List[str]:
    risks = []
    if usable_day_count == 0:
        risks.append("Sin franjas horarias disponibles: se usa un plan estándar")
    elif usable_day_count < MAX_WORKOUT_DAYS:
        risks.append("Pocas franjas disponibles limitan la frecuencia semanal")
    if _has_consecutive_days(plan):
        risks.append("Sesiones en días consecutivos pueden acumular fatiga")
    if plan.recovery_score < 0.5:
        risks.append("Riesgo de fatiga acumulada sin descarga programada")
    return risks


def optimize_workout_timing(
    schedule: Sequence[TimeSlot],
    performance_data: Sequence[PerformanceMetrics] = (),
) -> OptimalSchedule:
    """
    Build a weekly plan on the user's best-performing time slots.

    Args:
        schedule: Available time slots; last-resort slots are never used
        performance_data: Past sessions, timestamped, with satisfaction,
            volume, intensity, fatigue and adherence

    Returns:
        The plan, an alternative on the next-best days when available, and an
        adherence prediction
    """
    performance_map = analyze_time_performance(performance_data)
    ranked_slots = find_optimal_workout_times(schedule, performance_map)
    day_slots = _distinct_day_slots(ranked_slots)
    ranked_days = list(day_slots)

    chosen_days = ranked_days[:MAX_WORKOUT_DAYS]
    if chosen_days:
        workout_slots: Dict[str, Optional[TimeSlot]] = {day: day_slots[day] for day in chosen_days}
    else:
        workout_slots = {day: None for day in DEFAULT_WORKOUT_DAYS}

    weekly_plan = generate_weekly_plan(workout_slots, performance_data)

    alternatives = []
    alternative_days = ranked_days[MAX_WORKOUT_DAYS:2 * MAX_WORKOUT_DAYS]
    if alternative_days:
        alternatives.append(generate_weekly_plan(
            {day: day_slots[day] for day in alternative_days}, performance_data
        ))

    logger.debug("workout_timing_optimized", usable_slots=len(ranked_slots),
                 workout_days=list(workout_slots))

    return OptimalSchedule(
        schedule=ScheduleRecommendation(
            weekly_plan=weekly_plan,
            reasoning=list(SCHEDULE_REASONING),
            alternatives=alternatives,
            adaptations=list(SCHEDULE_ADAPTATIONS),
        ),
        adherence_prediction=predict_adherence(ranked_slots, performance_data),
        success_factors=identify_success_factors(weekly_plan, workout_slots),
        risk_factors=identify_risk_factors(weekly_plan, len(ranked_days)),
    )
