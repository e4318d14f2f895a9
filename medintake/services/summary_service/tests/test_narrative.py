"""Tests for the narrative patient summary."""
from medintake.shared.models import Frequency, PHQ9Response, Symptom
from medintake.services.summary_service.narrative import (
    build_narrative_summary,
    describe_symptom,
    filled_items,
)


HEADACHE = Symptom(
    type="headache",
    severity=7,
    frequency=Frequency.INTERMITTENT,
    duration_number=3,
    duration_unit="day(s)",
)
NAUSEA = Symptom(type="nausea", severity=4, frequency=Frequency.CONSTANT)


class TestDescribeSymptom:
    """Tests for symptom phrasing."""

    def test_full_symptom(self):
        assert describe_symptom(HEADACHE) == "headache (severity 7/10, intermittent, 3 days)"

    def test_singular_duration(self):
        assert describe_symptom(NAUSEA) == "nausea (severity 4/10, constant, 1 day)"

    def test_bare_name(self):
        assert describe_symptom("cough") == "cough"


class TestBuildNarrativeSummary:
    """Tests for build_narrative_summary()."""

    def test_symptoms_only(self):
        assert build_narrative_summary(["cough", "fever"]) == "Patient is experiencing: cough; fever."

    def test_all_clauses_in_order(self):
        responses = {
            "medications": "Yes",
            "medication_list": "ibuprofen",
            "allergies": "No",
            "allergy_list": "penicillin",
            "previous_episodes": "YES",
            "previous_treatment": "rest",
            "main_concern": "migraine",
        }

        summary = build_narrative_summary(
            [HEADACHE, NAUSEA],
            responses,
            PHQ9Response(q1=2, q2=1, difficulty=1),
        )

        assert summary == (
            "Patient is experiencing: headache (severity 7/10, intermittent, 3 days); "
            "nausea (severity 4/10, constant, 1 day). "
            "Current medications include ibuprofen. "
            "History of similar episodes; prior treatment: rest. "
            "Primary concern: migraine. "
            "PHQ-9 score 3/27 (minimal)."
        )

    def test_clause_requires_yes(self):
        summary = build_narrative_summary(
            [HEADACHE],
            {"medications": "no", "medication_list": "ibuprofen"},
        )
        assert "medications" not in summary

    def test_zero_phq9_omitted(self):
        summary = build_narrative_summary([HEADACHE], phq9=PHQ9Response())
        assert "PHQ-9" not in summary

    def test_phq9_mapping(self):
        summary = build_narrative_summary(["fatigue"], phq9={"q1": 3, "q2": 3, "q3": 3, "q4": 2})
        assert summary.endswith("PHQ-9 score 11/27 (moderate).")

    def test_trailing_whitespace_trimmed(self):
        summary = build_narrative_summary(["cough"], {"main_concern": "sleep"})
        assert summary == "Patient is experiencing: cough. Primary concern: sleep."

    def test_deterministic(self):
        responses = {"allergies": "yes", "allergy_list": "dust"}
        first = build_narrative_summary([HEADACHE, NAUSEA], responses)
        second = build_narrative_summary([HEADACHE, NAUSEA], dict(responses))
        assert first == second


class TestFilledItems:
    """Tests for blank filtering ahead of the narrative."""

    def test_blank_entries_dropped(self):
        items = filled_items([HEADACHE, Symptom(type=" "), "", "  nausea "])

        assert items == [HEADACHE, "nausea"]

    def test_mixed_rows_and_names(self):
        summary = build_narrative_summary(filled_items([HEADACHE, "dizziness"]))

        assert summary == "Patient is experiencing: headache (severity 7/10, intermittent, 3 days); dizziness."
