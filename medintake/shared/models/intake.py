"""Intake questionnaire domain models.

Core enums and immutable records for the patient intake flow: symptoms,
demographics, health metrics, the PHQ-9 screen, questions and the rule
records evaluated by the contextual question engine.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple


DURATION_UNITS: Tuple[str, ...] = ("hour(s)", "day(s)", "week(s)", "month(s)", "year(s)")

PHQ9_ITEMS: Tuple[str, ...] = ("q1", "q2", "q3", "q4", "q5", "q6", "q7", "q8", "q9")


class Frequency(Enum):
    """How often a symptom occurs."""
    CONSTANT = "constant"
    INTERMITTENT = "intermittent"
    ONCE = "once"


class BodySystem(Enum):
    """Coarse clinical categories used to group related symptoms."""
    NEUROLOGICAL = "neurological"
    CARDIOVASCULAR = "cardiovascular"
    GASTROINTESTINAL = "gastrointestinal"
    RESPIRATORY = "respiratory"
    MUSCULOSKELETAL = "musculoskeletal"
    CONSTITUTIONAL = "constitutional"
    GENITOURINARY = "genitourinary"
    OTHER = "other"


class QuestionType(Enum):
    TEXT = "text"
    SELECT = "select"
    MULTISELECT = "multiselect"
    SCALE = "scale"
    YESNO = "yesno"


class QuestionSource(Enum):
    """Where a question came from."""
    STATIC = "static"           # Compiled into the question bank
    GENERATED = "generated"     # Produced per session (oracle or rule engine)


class RuleCategory(Enum):
    URGENT = "urgent"
    DIAGNOSTIC = "diagnostic"
    DEMOGRAPHIC = "demographic"
    LIFESTYLE = "lifestyle"


class SeverityCategory(Enum):
    """Display bucket for a 1-10 symptom severity."""
    LOW = "Low"             # 1-3
    MODERATE = "Moderate"   # 4-6
    SEVERE = "Severe"       # 7-10


class DepressionBand(Enum):
    """PHQ-9 total score bands.

    Source: Kroenke K, Spitzer RL, Williams JB. The PHQ-9. J Gen Intern Med 2001.
    """
    MINIMAL = "minimal"     # 0-4
    MILD = "mild"           # 5-9
    MODERATE = "moderate"   # 10-14
    SEVERE = "severe"       # 15-27


class RiskLevel(Enum):
    """Overall urgency attached to an analysis for the reviewing clinician."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    URGENT = "urgent"


def _check_scale(name: str, value: float, low: float = 1, high: float = 10) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be {low}-{high}, got {value}")


@dataclass(frozen=True)
class Symptom:
    """One symptom row entered by the patient."""
    type: str
    severity: int = 1
    frequency: Frequency = Frequency.INTERMITTENT
    duration_number: int = 1
    duration_unit: str = "day(s)"
    description: Optional[str] = None

    def __post_init__(self):
        _check_scale("Severity", self.severity)
        if self.duration_number < 1:
            raise ValueError(f"Duration must be a positive integer, got {self.duration_number}")

    @property
    def is_filled(self) -> bool:
        """A row only counts as a symptom once a type has been chosen."""
        return bool(self.type and self.type.strip())


@dataclass(frozen=True)
class PatientInfo:
    """Demographics block from the first intake page."""
    name: str = ""
    date_of_birth: Optional[date] = None
    gender: str = ""
    race: str = ""
    ethnicity: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    medical_id: Optional[str] = None
    age: Optional[int] = None

    def age_on(self, today: Optional[date] = None) -> int:
        """Age in whole years, preferring the stated age over date of birth."""
        if self.age is not None:
            return self.age
        if self.date_of_birth is None:
            return 0
        today = today or date.today()
        years = today.year - self.date_of_birth.year
        if (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return years


@dataclass(frozen=True)
class SleepMetrics:
    quality: int = 5                # 1 = very poor, 10 = excellent
    hours_per_night: float = 7.0
    difficulty_falling_asleep: bool = False
    frequent_waking: bool = False

    def __post_init__(self):
        _check_scale("Sleep quality", self.quality)
        _check_scale("Hours per night", self.hours_per_night, 0, 24)


@dataclass(frozen=True)
class MoodMetrics:
    overall: int = 5                # 1 = very low, 10 = very high
    anxiety: int = 5
    depression: int = 5
    stress: int = 5

    def __post_init__(self):
        for name in ("overall", "anxiety", "depression", "stress"):
            _check_scale(f"Mood {name}", getattr(self, name))


@dataclass(frozen=True)
class EnergyMetrics:
    level: int = 5
    fatigue_frequency: str = "sometimes"    # never, rarely, sometimes, often, always

    def __post_init__(self):
        _check_scale("Energy level", self.level)


@dataclass(frozen=True)
class AppetiteMetrics:
    level: int = 5
    changes: str = "no_change"              # increased, decreased, no_change

    def __post_init__(self):
        _check_scale("Appetite level", self.level)


@dataclass(frozen=True)
class HealthMetrics:
    sleep: SleepMetrics = field(default_factory=SleepMetrics)
    mood: MoodMetrics = field(default_factory=MoodMetrics)
    energy: EnergyMetrics = field(default_factory=EnergyMetrics)
    appetite: AppetiteMetrics = field(default_factory=AppetiteMetrics)


@dataclass(frozen=True)
class PainLocation:
    """A marked pain site, used for the body heat-map."""
    location: str
    severity: int
    type: str = "other"             # sharp, dull, throbbing, burning, cramping, other
    description: Optional[str] = None

    def __post_init__(self):
        _check_scale("Pain severity", self.severity)


@dataclass(frozen=True)
class PHQ9Response:
    """Answers to the nine PHQ-9 items (0-3 each) plus the difficulty item."""
    q1: int = 0
    q2: int = 0
    q3: int = 0
    q4: int = 0
    q5: int = 0
    q6: int = 0
    q7: int = 0
    q8: int = 0
    q9: int = 0     # Thoughts of self-harm
    difficulty: Optional[int] = None

    def __post_init__(self):
        for item in PHQ9_ITEMS:
            _check_scale(f"PHQ-9 {item}", getattr(self, item), 0, 3)
        if self.difficulty is not None:
            _check_scale("PHQ-9 difficulty", self.difficulty, 0, 3)

    @property
    def items(self) -> Dict[str, int]:
        return {item: getattr(self, item) for item in PHQ9_ITEMS}

    @property
    def score(self) -> int:
        return sum(self.items.values())

    @property
    def requires_difficulty(self) -> bool:
        """The difficulty item is only asked once any problem is endorsed."""
        return any(value > 0 for value in self.items.values())


@dataclass(frozen=True)
class PatientContext:
    """Derived view of the session used by rule predicates.

    Never mutated; rebuilt from the session on every evaluation.
    """
    age: int = 0
    gender: str = ""
    race: str = ""
    symptom_types: frozenset = frozenset()
    max_severity: int = 0
    has_multiple_symptoms: bool = False
    poor_sleep: bool = False
    high_stress: bool = False
    mood_concerns: bool = False
    low_energy: bool = False
    affected_systems: frozenset = frozenset()
    phq9_score: int = 0
    self_harm_risk: bool = False


@dataclass(frozen=True)
class Question:
    """A single question shown to the patient.

    follow_up maps a trigger answer to the ids of child questions that
    become visible when the question is answered with that value.
    """
    id: str
    text: str
    type: QuestionType = QuestionType.TEXT
    options: Optional[Tuple[str, ...]] = None
    required: bool = False
    follow_up: Optional[Dict[str, Tuple[str, ...]]] = None
    source: QuestionSource = QuestionSource.STATIC

    def __post_init__(self):
        needs_options = self.type in (QuestionType.SELECT, QuestionType.MULTISELECT)
        if needs_options and not self.options:
            raise ValueError(f"Question {self.id} of type {self.type.value} requires options")
        if not needs_options and self.options:
            raise ValueError(f"Question {self.id} of type {self.type.value} cannot have options")

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "required": self.required,
        }
        if self.options:
            result["options"] = list(self.options)
        if self.follow_up:
            result["followUp"] = {answer: list(ids) for answer, ids in self.follow_up.items()}
        return result


Predicate = Callable[[PatientContext], bool]


@dataclass(frozen=True)
class Rule:
    """Declarative condition -> questions entry for the contextual engine."""
    name: str
    predicate: Predicate
    questions: Tuple[str, ...]
    priority: int
    category: RuleCategory = RuleCategory.DIAGNOSTIC


@dataclass(frozen=True)
class DiagnosticSuggestions:
    """Oracle output for the diagnostic-question step."""
    diagnostic_questions: List[Question] = field(default_factory=list)
    potential_diseases: List[str] = field(default_factory=list)
    red_flags: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    patient_summary: str = ""

    def to_dict(self) -> dict:
        return {
            "diagnosticQuestions": [q.to_dict() for q in self.diagnostic_questions],
            "potentialDiseases": self.potential_diseases,
            "redFlags": self.red_flags,
            "recommendations": self.recommendations,
            "patientSummary": self.patient_summary,
        }


@dataclass(frozen=True)
class AIAnalysis:
    """Doctor-facing analysis of a submitted questionnaire."""
    summary: str = "Analysis completed"
    risk_level: RiskLevel = RiskLevel.MODERATE
    key_symptoms: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    follow_up_questions: List[str] = field(default_factory=list)
    doctor_notes: str = ""
    urgency_score: int = 5      # 1-10

    def __post_init__(self):
        _check_scale("Urgency score", self.urgency_score)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "riskLevel": self.risk_level.value,
            "keySymptoms": self.key_symptoms,
            "recommendations": self.recommendations,
            "followUpQuestions": self.follow_up_questions,
            "doctorNotes": self.doctor_notes,
            "urgencyScore": self.urgency_score,
        }


@dataclass(frozen=True)
class Questionnaire:
    """A submitted questionnaire, as sent for analysis and reporting."""
    patient_info: PatientInfo
    symptoms: Tuple[Symptom, ...]
    health_metrics: HealthMetrics = field(default_factory=HealthMetrics)
    pain_locations: Tuple[PainLocation, ...] = ()
    phq9: Optional[PHQ9Response] = None
    responses: Dict[str, str] = field(default_factory=dict)
    additional_notes: Optional[str] = None
    submission_date: Optional[str] = None
