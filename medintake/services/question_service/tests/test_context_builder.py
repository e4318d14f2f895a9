"""Tests for the context builder thresholds.

Each flag is checked at the boundary on both sides.
"""
from datetime import date

import pytest

from medintake.shared.models import (
    BodySystem,
    EnergyMetrics,
    HealthMetrics,
    MoodMetrics,
    PatientInfo,
    PHQ9Response,
    SleepMetrics,
    Symptom,
)
from medintake.services.question_service.context_builder import (
    build_context,
    has_high_stress,
    has_low_energy,
    has_mood_concerns,
    has_poor_sleep,
    max_severity,
)


def metrics(sleep=None, mood=None, energy=None) -> HealthMetrics:
    return HealthMetrics(
        sleep=sleep or SleepMetrics(),
        mood=mood or MoodMetrics(),
        energy=energy or EnergyMetrics(),
    )


class TestThresholds:
    """Tests for the per-metric flag functions."""

    @pytest.mark.parametrize("quality,hours,expected", [
        (4, 8.0, True),
        (5, 8.0, False),
        (7, 5.9, True),
        (7, 6.0, False),
    ])
    def test_poor_sleep(self, quality, hours, expected):
        sleep = SleepMetrics(quality=quality, hours_per_night=hours)
        assert has_poor_sleep(metrics(sleep=sleep)) is expected

    @pytest.mark.parametrize("stress,anxiety,expected", [
        (7, 1, True),
        (1, 7, True),
        (6, 6, False),
    ])
    def test_high_stress(self, stress, anxiety, expected):
        mood = MoodMetrics(stress=stress, anxiety=anxiety)
        assert has_high_stress(metrics(mood=mood)) is expected

    @pytest.mark.parametrize("overall,depression,expected", [
        (4, 1, True),
        (8, 6, True),
        (5, 5, False),
    ])
    def test_mood_concerns(self, overall, depression, expected):
        mood = MoodMetrics(overall=overall, depression=depression)
        assert has_mood_concerns(metrics(mood=mood)) is expected

    @pytest.mark.parametrize("level,expected", [(4, True), (5, False)])
    def test_low_energy(self, level, expected):
        assert has_low_energy(metrics(energy=EnergyMetrics(level=level))) is expected

    def test_form_defaults_raise_no_flags(self):
        default = HealthMetrics()
        assert not has_poor_sleep(default)
        assert not has_high_stress(default)
        assert not has_mood_concerns(default)
        assert not has_low_energy(default)


class TestMaxSeverity:
    """Tests for max_severity()."""

    def test_no_symptoms_is_zero(self):
        assert max_severity([]) == 0

    def test_blank_rows_are_ignored(self):
        assert max_severity([Symptom(type="", severity=9), Symptom(type="cough", severity=3)]) == 3

    def test_highest_severity_wins(self):
        symptoms = [Symptom(type="cough", severity=3), Symptom(type="fever", severity=8)]
        assert max_severity(symptoms) == 8


class TestBuildContext:
    """Tests for build_context()."""

    def test_symptom_fields(self):
        symptoms = [
            Symptom(type="Chest_Pain", severity=8),
            Symptom(type="nausea", severity=4),
            Symptom(type="", severity=10),
        ]

        context = build_context(PatientInfo(age=50), symptoms)

        assert context.symptom_types == {"chest pain", "nausea"}
        assert context.max_severity == 8
        assert context.has_multiple_symptoms is True
        assert context.affected_systems == {
            BodySystem.CARDIOVASCULAR,
            BodySystem.GASTROINTESTINAL,
        }

    def test_single_filled_row_is_not_multiple(self):
        symptoms = [Symptom(type="cough"), Symptom(type="  ")]
        assert build_context(PatientInfo(), symptoms).has_multiple_symptoms is False

    def test_age_from_date_of_birth(self):
        info = PatientInfo(date_of_birth=date(1980, 6, 15), gender="female")

        before_birthday = build_context(info, [], today=date(2024, 6, 14))
        on_birthday = build_context(info, [], today=date(2024, 6, 15))

        assert before_birthday.age == 43
        assert on_birthday.age == 44
        assert on_birthday.gender == "female"

    def test_stated_age_preferred(self):
        info = PatientInfo(date_of_birth=date(1980, 6, 15), age=30)
        assert build_context(info, [], today=date(2024, 1, 1)).age == 30

    def test_missing_age_is_zero(self):
        assert build_context(PatientInfo(), []).age == 0

    def test_phq9_fields(self):
        phq9 = PHQ9Response(q1=2, q2=3, q9=1, difficulty=2)

        context = build_context(PatientInfo(), [], phq9=phq9)

        assert context.phq9_score == 6
        assert context.self_harm_risk is True

    def test_metric_flags(self):
        context = build_context(
            PatientInfo(),
            [],
            metrics(sleep=SleepMetrics(quality=3), energy=EnergyMetrics(level=2)),
        )

        assert context.poor_sleep is True
        assert context.low_energy is True
        assert context.high_stress is False

    def test_defaults_without_metrics_or_phq9(self):
        context = build_context(PatientInfo(), [Symptom(type="cough")])

        assert context.phq9_score == 0
        assert context.self_harm_risk is False
        assert context.poor_sleep is False
