"""Question Service: what to ask the patient next.

Every question shown to a patient is either static (compiled into the
question bank) or generated per session (oracle or rule engine). Generated
questions always pass through the duplicate filter before display.

Components:
- taxonomy.py: symptom catalog and body-system classifier
- question_bank.py: default and symptom-specific questions
- context_builder.py: session data -> PatientContext
- rule_engine.py: contextual rules and question selection
- dedup_filter.py: drops generated questions the bank already covers
- visibility.py: conditional follow-up visibility
- config.py: selection config and keyword tables

Usage:
    from medintake.services.question_service import RuleEngine, build_context
    context = build_context(patient_info, symptoms, metrics, phq9)
    questions = RuleEngine().contextual_questions(context)
"""

from .config import QuestionConfig, KEY_PHRASES, BODY_SYSTEM_PATTERNS
from .taxonomy import SYMPTOM_TYPES, classify, normalize_symptom_key
from .question_bank import (
    DEFAULT_QUESTIONS,
    SYMPTOM_QUESTIONS,
    HARDCODED_QUESTIONS,
    questions_for_symptoms,
)
from .context_builder import build_context
from .rule_engine import DEFAULT_RULES, RuleEngine, matching_rules, rank_questions, select_questions
from .dedup_filter import filter_duplicates, is_duplicate, normalize_question
from .visibility import build_follow_up_index, compute_visibility

__all__ = [
    "QuestionConfig",
    "KEY_PHRASES",
    "BODY_SYSTEM_PATTERNS",
    "SYMPTOM_TYPES",
    "classify",
    "normalize_symptom_key",
    "DEFAULT_QUESTIONS",
    "SYMPTOM_QUESTIONS",
    "HARDCODED_QUESTIONS",
    "questions_for_symptoms",
    "build_context",
    "DEFAULT_RULES",
    "RuleEngine",
    "matching_rules",
    "rank_questions",
    "select_questions",
    "filter_duplicates",
    "is_duplicate",
    "normalize_question",
    "build_follow_up_index",
    "compute_visibility",
]
