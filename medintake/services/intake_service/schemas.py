"""Wire schemas for the intake HTTP API.

Payloads use camelCase keys. Each model converts itself to the frozen
domain records in medintake.shared.models; pydantic validation errors
are flattened into the {field, message} issue list used by
medintake.shared.errors.ValidationError.
"""
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from medintake.shared.errors import ValidationError
from medintake.shared.models import (
    AppetiteMetrics,
    EnergyMetrics,
    Frequency,
    HealthMetrics,
    MoodMetrics,
    PainLocation,
    PatientInfo,
    PHQ9Response,
    Questionnaire,
    SleepMetrics,
    Symptom,
)
from medintake.services.summary_service.narrative import filled_items

ModelT = TypeVar("ModelT", bound=BaseModel)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

DurationUnit = Literal["hour(s)", "day(s)", "week(s)", "month(s)", "year(s)"]


class WireModel(BaseModel):
    """Base for request models: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class PatientInfoIn(WireModel):
    name: str = Field(min_length=1)
    age: Optional[int] = Field(None, ge=0, le=120)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    medical_id: Optional[str] = None
    gender: Optional[str] = None
    race: Optional[str] = None
    ethnicity: Optional[str] = None
    date_of_birth: Optional[date] = None

    @field_validator("email", "phone", "medical_id", "date_of_birth", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_domain(self) -> PatientInfo:
        return PatientInfo(
            name=self.name,
            date_of_birth=self.date_of_birth,
            gender=self.gender or "",
            race=self.race or "",
            ethnicity=self.ethnicity or "",
            email=self.email,
            phone=self.phone,
            medical_id=self.medical_id,
            age=self.age,
        )


class SymptomIn(WireModel):
    type: str = Field(min_length=1)
    severity: int = Field(ge=1, le=10)
    frequency: Frequency = Frequency.INTERMITTENT
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration_number: int = Field(1, ge=1)
    duration_unit: DurationUnit = "day(s)"

    def to_domain(self) -> Symptom:
        return Symptom(
            type=self.type,
            severity=self.severity,
            frequency=self.frequency,
            duration_number=self.duration_number,
            duration_unit=self.duration_unit,
            description=self.description or None,
        )


class SymptomRowIn(SymptomIn):
    """A symptom row as edited in the form; the type may still be blank."""
    type: str = ""
    severity: int = Field(1, ge=1, le=10)


class PainLocationIn(WireModel):
    location: str = Field(min_length=1)
    severity: int = Field(ge=1, le=10)
    type: Literal["sharp", "dull", "throbbing", "burning", "cramping", "other"] = "other"
    description: Optional[str] = None

    def to_domain(self) -> PainLocation:
        return PainLocation(
            location=self.location,
            severity=self.severity,
            type=self.type,
            description=self.description or None,
        )


class SleepIn(WireModel):
    quality: int = Field(5, ge=1, le=10)
    hours_per_night: float = Field(7.0, ge=0, le=24)
    difficulty_falling_asleep: bool = False
    frequent_waking: bool = False


class MoodIn(WireModel):
    overall: int = Field(5, ge=1, le=10)
    anxiety: int = Field(5, ge=1, le=10)
    depression: int = Field(5, ge=1, le=10)
    stress: int = Field(5, ge=1, le=10)


class EnergyIn(WireModel):
    level: int = Field(5, ge=1, le=10)
    fatigue_frequency: Literal["never", "rarely", "sometimes", "often", "always"] = "sometimes"


class AppetiteIn(WireModel):
    level: int = Field(5, ge=1, le=10)
    changes: Literal["increased", "decreased", "no_change"] = "no_change"


class HealthMetricsIn(WireModel):
    sleep: SleepIn = Field(default_factory=SleepIn)
    mood: MoodIn = Field(default_factory=MoodIn)
    energy: EnergyIn = Field(default_factory=EnergyIn)
    appetite: AppetiteIn = Field(default_factory=AppetiteIn)

    def to_domain(self) -> HealthMetrics:
        return HealthMetrics(
            sleep=SleepMetrics(**self.sleep.model_dump()),
            mood=MoodMetrics(**self.mood.model_dump()),
            energy=EnergyMetrics(**self.energy.model_dump()),
            appetite=AppetiteMetrics(**self.appetite.model_dump()),
        )


class PHQ9In(WireModel):
    """PHQ-9 answers keyed q1..q9 plus the optional difficulty item."""
    q1: int = Field(0, ge=0, le=3)
    q2: int = Field(0, ge=0, le=3)
    q3: int = Field(0, ge=0, le=3)
    q4: int = Field(0, ge=0, le=3)
    q5: int = Field(0, ge=0, le=3)
    q6: int = Field(0, ge=0, le=3)
    q7: int = Field(0, ge=0, le=3)
    q8: int = Field(0, ge=0, le=3)
    q9: int = Field(0, ge=0, le=3)
    difficulty: Optional[int] = Field(None, ge=0, le=3)

    def to_domain(self) -> PHQ9Response:
        return PHQ9Response(**self.model_dump())


class AnalyzeRequest(WireModel):
    """Full questionnaire submitted for analysis."""
    patient_info: PatientInfoIn
    symptoms: List[SymptomIn] = Field(min_length=1)
    pain_locations: List[PainLocationIn] = Field(default_factory=list)
    health_metrics: HealthMetricsIn = Field(default_factory=HealthMetricsIn)
    phq9_responses: Optional[PHQ9In] = Field(None, alias="phq9Responses")
    responses: Dict[str, str] = Field(default_factory=dict)
    additional_notes: Optional[str] = None
    submission_date: Optional[str] = None

    def to_domain(self) -> Questionnaire:
        return Questionnaire(
            patient_info=self.patient_info.to_domain(),
            symptoms=tuple(s.to_domain() for s in self.symptoms),
            health_metrics=self.health_metrics.to_domain(),
            pain_locations=tuple(p.to_domain() for p in self.pain_locations),
            phq9=self.phq9_responses.to_domain() if self.phq9_responses else None,
            responses=dict(self.responses),
            additional_notes=self.additional_notes or None,
            submission_date=self.submission_date,
        )


class DemographicsIn(WireModel):
    age: Optional[int] = Field(None, ge=0, le=120)
    gender: Optional[str] = None

    def to_domain(self) -> PatientInfo:
        return PatientInfo(age=self.age, gender=self.gender or "")


class SymptomsRequest(WireModel):
    """Diagnostic suggestion request.

    currentSymptoms carries the symptom names; fullSymptoms, when present,
    carries the complete rows (or bare names) used for the narrative and
    the fallback context.
    """
    current_symptoms: List[str] = Field(default_factory=list)
    full_symptoms: Optional[List[Union[SymptomRowIn, str]]] = None
    patient_info: Optional[DemographicsIn] = None
    phq9_responses: Optional[PHQ9In] = Field(None, alias="phq9Responses")
    summary_only: bool = False
    responses: Dict[str, str] = Field(default_factory=dict)

    def narrative_items(self) -> List[Union[Symptom, str]]:
        """Symptoms as given: full rows stay rows, bare names stay names.

        A bare name carries no severity, frequency or duration, so the
        narrative must not describe it with row defaults.
        """
        if self.full_symptoms:
            items = [s.to_domain() if isinstance(s, SymptomRowIn) else s for s in self.full_symptoms]
        else:
            items = list(self.current_symptoms)
        return filled_items(items)

    def demographics(self) -> PatientInfo:
        return self.patient_info.to_domain() if self.patient_info else PatientInfo()

    def phq9(self) -> Optional[PHQ9Response]:
        return self.phq9_responses.to_domain() if self.phq9_responses else None


class ReportLinkRequest(WireModel):
    data: AnalyzeRequest
    analysis: Optional[Dict[str, Any]] = None
    base_path: str = "/report"


def issues_from(error: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into {field, message} entries.

    Field paths are dotted camelCase, e.g. "symptoms.0.severity".
    """
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "body",
            "message": err["msg"],
        }
        for err in error.errors()
    ]


def parse_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a JSON payload against a request model.

    Raises:
        ValidationError: With field-level issues if the payload is invalid
    """
    if not isinstance(payload, dict):
        raise ValidationError.single("body", "Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(issues_from(e)) from e
