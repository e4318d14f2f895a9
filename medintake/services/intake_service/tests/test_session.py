"""Tests for the questionnaire session reducer and derived views."""
from datetime import date

import pytest

from medintake.shared.errors import ValidationError
from medintake.shared.models import (
    BodySystem,
    DiagnosticSuggestions,
    HealthMetrics,
    MoodMetrics,
    PatientInfo,
    Question,
    QuestionSource,
    Symptom,
)
from medintake.services.intake_service.session import (
    AddSymptom,
    AdvancePage,
    AnswerQuestion,
    GoBack,
    Page,
    QuestionnaireSession,
    RemoveSymptom,
    Reset,
    SetAnalysis,
    SetGeneratedQuestions,
    SetHealthMetrics,
    SetPatientInfo,
    SetPHQ9Answer,
    UpdateSymptom,
    build_context,
    page_questions,
    reduce,
    to_questionnaire,
    validate_page,
    visible_questions,
)


PATIENT = PatientInfo(name="Jane Doe", date_of_birth=date(1990, 5, 1), gender="female")


def on_page(page: Page, **fields) -> QuestionnaireSession:
    return QuestionnaireSession(page=page, **fields)


class TestSymptomRows:
    """Tests for symptom row events."""

    def test_new_session_has_one_blank_row(self):
        session = QuestionnaireSession()

        assert len(session.symptoms) == 1
        assert session.filled_symptoms == []

    def test_add_update_remove(self):
        session = reduce(QuestionnaireSession(), AddSymptom())
        session = reduce(session, UpdateSymptom(0, Symptom(type="headache", severity=6)))
        session = reduce(session, UpdateSymptom(1, Symptom(type="nausea")))
        session = reduce(session, RemoveSymptom(0))

        assert [s.type for s in session.symptoms] == ["nausea"]

    def test_last_row_cannot_be_removed(self):
        with pytest.raises(ValidationError) as exc:
            reduce(QuestionnaireSession(), RemoveSymptom(0))

        assert exc.value.issues[0]["field"] == "symptoms"

    def test_bad_index(self):
        with pytest.raises(IndexError):
            reduce(QuestionnaireSession(), UpdateSymptom(3, Symptom(type="cough")))

    def test_input_state_is_not_modified(self):
        original = QuestionnaireSession()

        updated = reduce(original, UpdateSymptom(0, Symptom(type="cough")))
        answered = reduce(updated, AnswerQuestion("medications", "No"))

        assert original.symptoms[0].type == ""
        assert updated.answers == {}
        assert answered.answers == {"medications": "No"}

    def test_answers_are_read_only(self):
        session = reduce(QuestionnaireSession(), AnswerQuestion("medications", "No"))

        with pytest.raises(TypeError):
            session.answers["medications"] = "Yes"

        assert session.answers["medications"] == "No"

    def test_caller_dict_is_copied(self):
        answers = {"main_concern": "Sleep"}
        session = QuestionnaireSession(answers=answers)

        answers["main_concern"] = "Pain"

        assert session.answers == {"main_concern": "Sleep"}


class TestPHQ9Answers:
    """Tests for PHQ-9 item events."""

    def test_set_item(self):
        session = reduce(QuestionnaireSession(), SetPHQ9Answer("q2", 3))

        assert session.phq9.q2 == 3
        assert session.phq9.score == 3

    def test_unknown_item(self):
        with pytest.raises(ValueError):
            reduce(QuestionnaireSession(), SetPHQ9Answer("q10", 1))

    def test_out_of_range_value(self):
        with pytest.raises(ValueError):
            reduce(QuestionnaireSession(), SetPHQ9Answer("q1", 4))

    def test_difficulty_can_be_cleared(self):
        session = reduce(QuestionnaireSession(), SetPHQ9Answer("difficulty", 1))
        session = reduce(session, SetPHQ9Answer("difficulty", None))

        assert session.phq9.difficulty is None


class TestPageNavigation:
    """Tests for AdvancePage validation and GoBack."""

    def test_patient_info_required_fields(self):
        with pytest.raises(ValidationError) as exc:
            reduce(QuestionnaireSession(), AdvancePage())

        fields = [issue["field"] for issue in exc.value.issues]
        assert fields == ["patientInfo.name", "patientInfo.dateOfBirth", "patientInfo.gender"]

    def test_advance_from_patient_info(self):
        session = reduce(QuestionnaireSession(), SetPatientInfo(PATIENT))

        assert reduce(session, AdvancePage()).page == Page.SYMPTOMS

    def test_symptoms_page_needs_a_typed_symptom(self):
        session = on_page(Page.SYMPTOMS, patient_info=PATIENT)

        with pytest.raises(ValidationError):
            reduce(session, AdvancePage())

        session = reduce(session, UpdateSymptom(0, Symptom(type="headache")))
        assert reduce(session, AdvancePage()).page == Page.HEALTH_METRICS

    def test_phq9_difficulty_required_when_any_item_endorsed(self):
        session = reduce(on_page(Page.PHQ9), SetPHQ9Answer("q1", 1))

        assert validate_page(session)[0]["field"] == "phq9.difficulty"

        session = reduce(session, SetPHQ9Answer("difficulty", 0))
        assert validate_page(session) == []

    def test_phq9_all_zero_needs_no_difficulty(self):
        assert reduce(on_page(Page.PHQ9), AdvancePage()).page == Page.DEFAULT_QUESTIONS

    def test_required_visible_questions(self):
        session = on_page(Page.DEFAULT_QUESTIONS)

        fields = {issue["field"] for issue in validate_page(session)}

        assert "responses.medications" in fields
        assert "responses.medication_list" not in fields

    def test_hidden_follow_up_not_required(self):
        answers = {
            "medications": "No",
            "allergies": "No",
            "previous_episodes": "No",
            "main_concern": "Getting worse",
        }
        session = on_page(Page.DEFAULT_QUESTIONS, answers=answers)

        assert reduce(session, AdvancePage()).page == Page.SYMPTOM_QUESTIONS

    def test_visible_follow_up_required(self):
        answers = {
            "medications": "Yes",
            "allergies": "No",
            "previous_episodes": "No",
            "main_concern": "Getting worse",
        }
        session = on_page(Page.DEFAULT_QUESTIONS, answers=answers)

        assert [i["field"] for i in validate_page(session)] == ["responses.medication_list"]

    def test_results_is_last_page(self):
        session = on_page(Page.RESULTS)

        assert reduce(session, AdvancePage()).page == Page.RESULTS

    def test_go_back(self):
        assert reduce(on_page(Page.SYMPTOMS), GoBack()).page == Page.PATIENT_INFO
        assert reduce(on_page(Page.PATIENT_INFO), GoBack()).page == Page.PATIENT_INFO

    def test_reset(self):
        session = on_page(Page.RESULTS, patient_info=PATIENT, answers={"medications": "Yes"})

        assert reduce(session, Reset()) == QuestionnaireSession()

    def test_unknown_event(self):
        with pytest.raises(TypeError):
            reduce(QuestionnaireSession(), object())


class TestPageQuestions:
    """Tests for the per-page question views."""

    def test_default_page_hides_follow_ups_until_triggered(self):
        session = on_page(Page.DEFAULT_QUESTIONS)
        ids = [q.id for q in visible_questions(session)]

        assert ids == ["medications", "allergies", "previous_episodes", "main_concern"]

        session = reduce(session, AnswerQuestion("medications", "Yes"))
        assert "medication_list" in [q.id for q in visible_questions(session)]

    def test_symptom_page_follows_symptoms(self):
        session = on_page(
            Page.SYMPTOM_QUESTIONS,
            symptoms=(Symptom(type="Headache"), Symptom(type=""), Symptom(type="headache")),
        )

        ids = [q.id for q in page_questions(session)]

        assert ids
        assert all(i.startswith("headache") for i in ids)
        assert len(ids) == len(set(ids))

    def test_non_question_pages_are_empty(self):
        assert page_questions(on_page(Page.HEALTH_METRICS)) == []

    def test_generated_questions_are_duplicate_filtered(self):
        questions = (
            Question(id="diagnostic_1", text="Does light make the pain worse?", source=QuestionSource.GENERATED),
            Question(id="diagnostic_2", text="Are you taking any vitamins?", source=QuestionSource.GENERATED),
        )

        session = reduce(on_page(Page.DIAGNOSTIC_QUESTIONS), SetGeneratedQuestions(questions))

        assert [q.id for q in page_questions(session)] == ["diagnostic_1"]

    def test_analysis_replaces_generated_questions(self):
        suggestions = DiagnosticSuggestions(
            diagnostic_questions=[
                Question(id="diagnostic_1", text="Is the cough productive?", source=QuestionSource.GENERATED),
            ],
            patient_summary="Cough for two weeks.",
        )

        session = reduce(QuestionnaireSession(), SetAnalysis(suggestions))

        assert session.analysis is suggestions
        assert [q.text for q in session.generated_questions] == ["Is the cough productive?"]


class TestDerivedContext:
    """Tests for context and questionnaire derivation."""

    def test_build_context(self):
        session = QuestionnaireSession(
            patient_info=PATIENT,
            symptoms=(Symptom(type="chest pain", severity=8), Symptom(type="")),
            health_metrics=HealthMetrics(mood=MoodMetrics(stress=9)),
        )

        context = build_context(session, today=date(2025, 5, 1))

        assert context.age == 35
        assert context.max_severity == 8
        assert context.has_multiple_symptoms is False
        assert context.high_stress is True
        assert BodySystem.CARDIOVASCULAR in context.affected_systems

    def test_to_questionnaire_drops_blank_rows(self):
        session = QuestionnaireSession(
            patient_info=PATIENT,
            symptoms=(Symptom(type="cough"), Symptom(type=" ")),
            answers={"main_concern": "Sleep"},
        )

        questionnaire = to_questionnaire(session, submission_date="2025-05-01")

        assert [s.type for s in questionnaire.symptoms] == ["cough"]
        assert questionnaire.responses == {"main_concern": "Sleep"}
        assert questionnaire.submission_date == "2025-05-01"
