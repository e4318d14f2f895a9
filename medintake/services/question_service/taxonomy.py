"""Symptom taxonomy and body-system pattern matcher.

Tags a patient's symptom list with the body systems it touches. Used to
build the patient context and to steer the contextual question rules.
"""
import logging
from typing import FrozenSet, Iterable, Tuple

from medintake.shared.models import BodySystem
from .config import BODY_SYSTEM_PATTERNS

logger = logging.getLogger(__name__)


# Known symptom types offered in the intake form, grouped by system.
SYMPTOM_TYPES: Tuple[str, ...] = (
    # Neurological
    "headache", "dizziness", "confusion", "memory issues", "sensitivity to light",
    "sensitivity to sound", "balance problems", "concentration difficulty", "seizure",
    "weakness", "numbness", "tingling", "speech problems", "vision changes",
    # Gastrointestinal
    "nausea", "vomiting", "abdominal pain", "diarrhea", "constipation",
    "loss of appetite", "bloating", "heartburn", "difficulty swallowing",
    # Cardiovascular / respiratory
    "chest pain", "shortness of breath", "cough", "palpitations", "rapid heartbeat",
    "swelling legs", "fatigue", "exercise intolerance",
    # Musculoskeletal
    "joint pain", "muscle pain", "back pain", "neck pain", "stiffness", "swelling joints",
    # Constitutional
    "fever", "chills", "night sweats", "weight loss", "weight gain", "mood changes",
    "sleep disturbance", "anxiety", "depression",
    # Genitourinary
    "urinary frequency", "urinary urgency", "painful urination", "blood in urine",
    # Other
    "skin rash", "lump or mass", "other",
)


def normalize_symptom_key(symptom_type: str) -> str:
    """Canonical form of a symptom type: lowercase, spaces for underscores.

    Example:
        >>> normalize_symptom_key("Chest_Pain ")
        'chest pain'
    """
    return " ".join(str(symptom_type or "").replace("_", " ").lower().split())


def _matches(symptom: str, pattern: str) -> bool:
    return pattern in symptom or symptom in pattern


def classify(symptom_types: Iterable[str]) -> FrozenSet[BodySystem]:
    """Return the body systems touched by a list of symptom types.

    A system is affected when any of its keywords contains, or is contained
    by, any of the symptoms. Blank symptom rows are ignored.

    Args:
        symptom_types: Symptom type strings as entered

    Returns:
        Set of affected BodySystem values (empty for empty input)
    """
    symptoms = [normalize_symptom_key(s) for s in symptom_types]
    symptoms = [s for s in symptoms if s]
    if not symptoms:
        return frozenset()

    affected = frozenset(
        system
        for system, patterns in BODY_SYSTEM_PATTERNS.items()
        if any(_matches(symptom, pattern) for pattern in patterns for symptom in symptoms)
    )

    logger.debug(
        "SYMPTOMS_CLASSIFIED",
        extra={
            "symptom_count": len(symptoms),
            "affected_systems": sorted(s.value for s in affected),
        }
    )
    return affected
