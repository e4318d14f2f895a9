"""Questionnaire session state and its reducer.

The session is an immutable value. Every transition is a pure
reduce(state, event) -> state call; the input state is never modified.
Derived views (the questions on the current page, which of them are
visible, the rule-engine context) are recomputed from the state on
demand.
"""
import logging
from types import MappingProxyType
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Type

from medintake.shared.errors import ValidationError
from medintake.shared.models import (
    DiagnosticSuggestions,
    HealthMetrics,
    PatientContext,
    PatientInfo,
    PHQ9_ITEMS,
    PHQ9Response,
    Question,
    Questionnaire,
    Symptom,
)
from medintake.services.question_service import context_builder
from medintake.services.question_service.dedup_filter import filter_duplicates
from medintake.services.question_service.question_bank import (
    DEFAULT_QUESTIONS,
    questions_for_symptoms,
)
from medintake.services.question_service.visibility import compute_visibility

logger = logging.getLogger(__name__)


class Page(Enum):
    """Intake pages in presentation order."""
    PATIENT_INFO = "patient_info"
    SYMPTOMS = "symptoms"
    HEALTH_METRICS = "health_metrics"
    PHQ9 = "phq9"
    DEFAULT_QUESTIONS = "default_questions"
    SYMPTOM_QUESTIONS = "symptom_questions"
    DIAGNOSTIC_QUESTIONS = "diagnostic_questions"
    RESULTS = "results"


PAGE_ORDER: Tuple[Page, ...] = tuple(Page)


def _blank_row() -> Tuple[Symptom, ...]:
    return (Symptom(type=""),)


@dataclass(frozen=True)
class QuestionnaireSession:
    """Everything entered so far in one intake session.

    answers maps question id to the recorded answer and is read-only;
    multiselect answers are stored comma-joined. generated_questions holds
    the session-scoped questions for the diagnostic page.
    """
    patient_info: PatientInfo = field(default_factory=PatientInfo)
    symptoms: Tuple[Symptom, ...] = field(default_factory=_blank_row)
    health_metrics: HealthMetrics = field(default_factory=HealthMetrics)
    phq9: PHQ9Response = field(default_factory=PHQ9Response)
    answers: Mapping[str, str] = field(default_factory=dict)
    generated_questions: Tuple[Question, ...] = ()
    analysis: Optional[DiagnosticSuggestions] = None
    page: Page = Page.PATIENT_INFO

    def __post_init__(self):
        # Private copy behind a read-only view.
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    @property
    def filled_symptoms(self) -> List[Symptom]:
        return [s for s in self.symptoms if s.is_filled]


# Events

@dataclass(frozen=True)
class SetPatientInfo:
    patient_info: PatientInfo


@dataclass(frozen=True)
class AddSymptom:
    symptom: Symptom = field(default_factory=lambda: Symptom(type=""))


@dataclass(frozen=True)
class UpdateSymptom:
    index: int
    symptom: Symptom


@dataclass(frozen=True)
class RemoveSymptom:
    index: int


@dataclass(frozen=True)
class SetHealthMetrics:
    health_metrics: HealthMetrics


@dataclass(frozen=True)
class SetPHQ9Answer:
    """item is one of q1..q9 or "difficulty"."""
    item: str
    value: Optional[int]


@dataclass(frozen=True)
class AnswerQuestion:
    question_id: str
    answer: str


@dataclass(frozen=True)
class SetGeneratedQuestions:
    questions: Tuple[Question, ...]


@dataclass(frozen=True)
class SetAnalysis:
    """Oracle (or fallback) suggestions; their questions replace the generated set."""
    suggestions: DiagnosticSuggestions


@dataclass(frozen=True)
class AdvancePage:
    pass


@dataclass(frozen=True)
class GoBack:
    pass


@dataclass(frozen=True)
class Reset:
    pass


def _check_index(state: QuestionnaireSession, index: int) -> None:
    if not 0 <= index < len(state.symptoms):
        raise IndexError(f"No symptom row at index {index}")


def _set_patient_info(state: QuestionnaireSession, event: SetPatientInfo) -> QuestionnaireSession:
    return replace(state, patient_info=event.patient_info)


def _add_symptom(state: QuestionnaireSession, event: AddSymptom) -> QuestionnaireSession:
    return replace(state, symptoms=state.symptoms + (event.symptom,))


def _update_symptom(state: QuestionnaireSession, event: UpdateSymptom) -> QuestionnaireSession:
    _check_index(state, event.index)
    symptoms = list(state.symptoms)
    symptoms[event.index] = event.symptom
    return replace(state, symptoms=tuple(symptoms))


def _remove_symptom(state: QuestionnaireSession, event: RemoveSymptom) -> QuestionnaireSession:
    _check_index(state, event.index)
    if len(state.symptoms) == 1:
        raise ValidationError.single("symptoms", "At least one symptom row must remain")
    symptoms = state.symptoms[:event.index] + state.symptoms[event.index + 1:]
    return replace(state, symptoms=symptoms)


def _set_health_metrics(state: QuestionnaireSession, event: SetHealthMetrics) -> QuestionnaireSession:
    return replace(state, health_metrics=event.health_metrics)


def _set_phq9_answer(state: QuestionnaireSession, event: SetPHQ9Answer) -> QuestionnaireSession:
    if event.item not in PHQ9_ITEMS and event.item != "difficulty":
        raise ValueError(f"Unknown PHQ-9 item: {event.item}")
    if event.item != "difficulty" and event.value is None:
        raise ValueError(f"PHQ-9 {event.item} requires a value")
    return replace(state, phq9=replace(state.phq9, **{event.item: event.value}))


def _answer_question(state: QuestionnaireSession, event: AnswerQuestion) -> QuestionnaireSession:
    answers = dict(state.answers)
    answers[event.question_id] = event.answer
    return replace(state, answers=answers)


def _set_generated_questions(
    state: QuestionnaireSession,
    event: SetGeneratedQuestions,
) -> QuestionnaireSession:
    return replace(state, generated_questions=tuple(filter_duplicates(event.questions)))


def _set_analysis(state: QuestionnaireSession, event: SetAnalysis) -> QuestionnaireSession:
    return replace(
        state,
        analysis=event.suggestions,
        generated_questions=tuple(filter_duplicates(event.suggestions.diagnostic_questions)),
    )


def _advance_page(state: QuestionnaireSession, event: AdvancePage) -> QuestionnaireSession:
    issues = validate_page(state)
    if issues:
        logger.info(
            "PAGE_VALIDATION_FAILED",
            extra={"page": state.page.value, "fields": [i["field"] for i in issues]}
        )
        raise ValidationError(issues)
    position = PAGE_ORDER.index(state.page)
    if position == len(PAGE_ORDER) - 1:
        return state
    return replace(state, page=PAGE_ORDER[position + 1])


def _go_back(state: QuestionnaireSession, event: GoBack) -> QuestionnaireSession:
    position = PAGE_ORDER.index(state.page)
    if position == 0:
        return state
    return replace(state, page=PAGE_ORDER[position - 1])


def _reset(state: QuestionnaireSession, event: Reset) -> QuestionnaireSession:
    return QuestionnaireSession()


_HANDLERS: Dict[Type, Callable] = {
    SetPatientInfo: _set_patient_info,
    AddSymptom: _add_symptom,
    UpdateSymptom: _update_symptom,
    RemoveSymptom: _remove_symptom,
    SetHealthMetrics: _set_health_metrics,
    SetPHQ9Answer: _set_phq9_answer,
    AnswerQuestion: _answer_question,
    SetGeneratedQuestions: _set_generated_questions,
    SetAnalysis: _set_analysis,
    AdvancePage: _advance_page,
    GoBack: _go_back,
    Reset: _reset,
}


def reduce(state: QuestionnaireSession, event) -> QuestionnaireSession:
    """Apply one event and return the new session.

    Args:
        state: Current session (left untouched)
        event: One of the event records above

    Returns:
        New session value

    Raises:
        ValidationError: If AdvancePage finds the current page incomplete,
            or RemoveSymptom would remove the last row
        TypeError: If the event type is unknown
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown session event: {type(event).__name__}")
    return handler(state, event)


def page_questions(state: QuestionnaireSession, page: Optional[Page] = None) -> List[Question]:
    """All questions belonging to a page, before visibility is applied."""
    page = page or state.page
    if page == Page.DEFAULT_QUESTIONS:
        return list(DEFAULT_QUESTIONS)
    if page == Page.SYMPTOM_QUESTIONS:
        return questions_for_symptoms(s.type for s in state.filled_symptoms)
    if page == Page.DIAGNOSTIC_QUESTIONS:
        return list(state.generated_questions)
    return []


def visible_questions(state: QuestionnaireSession, page: Optional[Page] = None) -> List[Question]:
    """Questions the page should currently render, in bank order."""
    questions = page_questions(state, page)
    visible = compute_visibility(questions, state.answers)
    return [q for q in questions if q.id in visible]


def build_context(state: QuestionnaireSession, today: Optional[date] = None) -> PatientContext:
    return context_builder.build_context(
        state.patient_info,
        state.symptoms,
        state.health_metrics,
        state.phq9,
        today=today,
    )


def validate_page(state: QuestionnaireSession) -> List[Dict[str, str]]:
    """Field issues that block leaving the current page; empty when complete."""
    issues: List[Dict[str, str]] = []
    page = state.page

    if page == Page.PATIENT_INFO:
        info = state.patient_info
        if not info.name.strip():
            issues.append({"field": "patientInfo.name", "message": "Name is required"})
        if info.date_of_birth is None:
            issues.append({"field": "patientInfo.dateOfBirth", "message": "Date of birth is required"})
        if not info.gender.strip():
            issues.append({"field": "patientInfo.gender", "message": "Gender is required"})
    elif page == Page.SYMPTOMS:
        if not state.filled_symptoms:
            issues.append({"field": "symptoms", "message": "At least one symptom is required"})
    elif page == Page.PHQ9:
        if state.phq9.requires_difficulty and state.phq9.difficulty is None:
            issues.append({
                "field": "phq9.difficulty",
                "message": "Please rate how difficult these problems have made things",
            })
    else:
        for question in visible_questions(state):
            if question.required and not (state.answers.get(question.id) or "").strip():
                issues.append({"field": f"responses.{question.id}", "message": "This question is required"})

    return issues


def to_questionnaire(state: QuestionnaireSession, submission_date: Optional[str] = None) -> Questionnaire:
    """Freeze the session into the questionnaire submitted for analysis."""
    return Questionnaire(
        patient_info=state.patient_info,
        symptoms=tuple(state.filled_symptoms),
        health_metrics=state.health_metrics,
        phq9=state.phq9,
        responses=dict(state.answers),
        submission_date=submission_date,
    )
