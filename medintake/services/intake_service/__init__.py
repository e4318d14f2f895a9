"""Intake Service: session state and the HTTP surface.

Components:
- schemas.py: pydantic request models and conversion to domain records
- session.py: immutable QuestionnaireSession and its reducer
- handler.py: Flask app (/api/symptoms, /api/analyze, /api/report-link, /report)

The handler is not imported here; it configures the app from the
environment at import time.
"""

from .schemas import AnalyzeRequest, SymptomsRequest, parse_payload
from .session import (
    Page,
    QuestionnaireSession,
    build_context,
    page_questions,
    reduce,
    to_questionnaire,
    validate_page,
    visible_questions,
)

__all__ = [
    "AnalyzeRequest",
    "SymptomsRequest",
    "parse_payload",
    "Page",
    "QuestionnaireSession",
    "build_context",
    "page_questions",
    "reduce",
    "to_questionnaire",
    "validate_page",
    "visible_questions",
]
