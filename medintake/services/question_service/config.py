"""Question Service configuration and keyword tables.

The keyword tables are matched with substring containment, so short
entries match broadly. Changing an entry changes which questions patients
see; update the tests alongside.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

from medintake.shared.models import BodySystem


@dataclass(frozen=True)
class QuestionConfig:
    """Configuration for contextual question selection."""

    # Maximum number of contextual questions returned by the rule engine
    max_results: int = 12

    # Version tracking for audit trail
    rule_version: str = "2025.09.27"


# Phrases whose topics are already covered by the default question bank.
# A candidate containing (or contained by) any of these is treated as a
# duplicate. Deliberately broad: dropping a borderline question is
# preferred over asking the patient the same thing twice.
KEY_PHRASES: Tuple[str, ...] = (
    # Medications
    "medications",
    "medication",
    "supplements",
    "vitamins",
    "drugs",
    # Allergies
    "allergies",
    "allergic",
    "allergy",
    # Previous episodes
    "previous episodes",
    "experienced before",
    "similar symptoms",
    # Treatment history
    "treatment",
    "effective",
    # Main concern
    "main concern",
    "concern about",
)


# Per-system keyword lists for the symptom pattern matcher.
# Matching is bidirectional substring containment, so a generic symptom
# such as "pain" lands in every system with a "... pain" keyword.
BODY_SYSTEM_PATTERNS: Dict[BodySystem, Tuple[str, ...]] = {
    BodySystem.NEUROLOGICAL: (
        "headache",
        "dizziness",
        "confusion",
        "memory issues",
        "sensitivity to light",
        "sensitivity to sound",
        "balance problems",
        "seizure",
        "weakness",
        "numbness",
        "speech problems",
        "vision changes",
    ),
    BodySystem.CARDIOVASCULAR: (
        "chest pain",
        "shortness of breath",
        "palpitations",
        "rapid heartbeat",
        "swelling legs",
    ),
    BodySystem.GASTROINTESTINAL: (
        "nausea",
        "vomiting",
        "abdominal pain",
        "diarrhea",
        "constipation",
        "loss of appetite",
    ),
    BodySystem.RESPIRATORY: (
        "cough",
        "shortness of breath",
    ),
    BodySystem.MUSCULOSKELETAL: (
        "joint pain",
        "muscle pain",
        "back pain",
        "neck pain",
    ),
    BodySystem.CONSTITUTIONAL: (
        "fever",
        "chills",
        "fatigue",
        "weight loss",
        "weight gain",
    ),
    BodySystem.GENITOURINARY: (
        "urinary frequency",
        "urinary urgency",
        "painful urination",
        "blood in urine",
    ),
    BodySystem.OTHER: (
        "skin rash",
        "lump or mass",
    ),
}
