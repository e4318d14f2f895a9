"""Shared domain models for the intake platform."""
from .intake import (
    AIAnalysis,
    AppetiteMetrics,
    BodySystem,
    DepressionBand,
    DiagnosticSuggestions,
    DURATION_UNITS,
    EnergyMetrics,
    Frequency,
    HealthMetrics,
    MoodMetrics,
    PainLocation,
    PatientContext,
    PatientInfo,
    PHQ9_ITEMS,
    PHQ9Response,
    Question,
    Questionnaire,
    QuestionSource,
    QuestionType,
    RiskLevel,
    Rule,
    RuleCategory,
    SeverityCategory,
    SleepMetrics,
    Symptom,
)

__all__ = [
    "AIAnalysis",
    "AppetiteMetrics",
    "BodySystem",
    "DepressionBand",
    "DiagnosticSuggestions",
    "DURATION_UNITS",
    "EnergyMetrics",
    "Frequency",
    "HealthMetrics",
    "MoodMetrics",
    "PainLocation",
    "PatientContext",
    "PatientInfo",
    "PHQ9_ITEMS",
    "PHQ9Response",
    "Question",
    "Questionnaire",
    "QuestionSource",
    "QuestionType",
    "RiskLevel",
    "Rule",
    "RuleCategory",
    "SeverityCategory",
    "SleepMetrics",
    "Symptom",
]
