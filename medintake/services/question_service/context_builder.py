"""Context builder: raw intake state -> PatientContext.

Each flag is a fixed threshold on one metric so that rule predicates
never read raw metrics directly.
"""
from datetime import date
from typing import Optional, Sequence

from medintake.shared.models import (
    HealthMetrics,
    PatientContext,
    PatientInfo,
    PHQ9Response,
    Symptom,
)
from .taxonomy import classify, normalize_symptom_key


def has_poor_sleep(metrics: HealthMetrics) -> bool:
    return metrics.sleep.quality <= 4 or metrics.sleep.hours_per_night < 6


def has_high_stress(metrics: HealthMetrics) -> bool:
    return metrics.mood.stress >= 7 or metrics.mood.anxiety >= 7


def has_mood_concerns(metrics: HealthMetrics) -> bool:
    return metrics.mood.overall <= 4 or metrics.mood.depression >= 6


def has_low_energy(metrics: HealthMetrics) -> bool:
    return metrics.energy.level <= 4


def max_severity(symptoms: Sequence[Symptom]) -> int:
    """Highest severity among filled symptom rows, 0 if there are none."""
    return max((s.severity for s in symptoms if s.is_filled), default=0)


def build_context(
    patient_info: PatientInfo,
    symptoms: Sequence[Symptom],
    metrics: Optional[HealthMetrics] = None,
    phq9: Optional[PHQ9Response] = None,
    today: Optional[date] = None,
) -> PatientContext:
    """Derive the rule-engine context from the current session data.

    Args:
        patient_info: Demographics
        symptoms: Symptom rows in entry order; blank rows are ignored
        metrics: Health metrics (form defaults if not yet entered)
        phq9: PHQ-9 answers (all zero if not yet entered)
        today: Reference date for age calculation

    Returns:
        Freshly built PatientContext
    """
    metrics = metrics or HealthMetrics()
    phq9 = phq9 or PHQ9Response()
    filled = [s for s in symptoms if s.is_filled]
    symptom_types = [s.type for s in filled]

    return PatientContext(
        age=patient_info.age_on(today),
        gender=patient_info.gender,
        race=patient_info.race,
        symptom_types=frozenset(normalize_symptom_key(t) for t in symptom_types),
        max_severity=max_severity(filled),
        has_multiple_symptoms=len(filled) > 1,
        poor_sleep=has_poor_sleep(metrics),
        high_stress=has_high_stress(metrics),
        mood_concerns=has_mood_concerns(metrics),
        low_energy=has_low_energy(metrics),
        affected_systems=classify(symptom_types),
        phq9_score=phq9.score,
        self_harm_risk=phq9.q9 > 0,
    )
