"""Diagnostic question oracle.

Wraps the LLM call for diagnostic suggestions and turns its JSON into
DiagnosticSuggestions. The oracle is treated as unreliable: anything other
than a well-formed response raises OracleUnavailable, and a response with
missing fields raises OracleMalformed carrying a defaulted partial result.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from medintake.shared.errors import OracleMalformed, OracleUnavailable
from medintake.shared.models import (
    DiagnosticSuggestions,
    PHQ9Response,
    Question,
    QuestionSource,
    QuestionType,
)
from .base_llm import BaseLLM
from .config import OracleConfig
from .prompts import DIAGNOSTIC_SYSTEM_PROMPT, build_diagnostic_prompt

logger = logging.getLogger(__name__)


SUGGESTION_FIELDS = (
    "diagnosticQuestions",
    "potentialDiseases",
    "redFlags",
    "recommendations",
    "patientSummary",
)

_OPTION_TYPES = (QuestionType.SELECT, QuestionType.MULTISELECT)


def load_json_object(raw: str) -> Dict[str, Any]:
    """Parse model output that must be a single JSON object.

    Raises:
        OracleUnavailable: If the text is not JSON or not an object
    """
    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise OracleUnavailable(f"Oracle returned unparseable JSON: {e}") from e
    if not isinstance(payload, dict):
        raise OracleUnavailable(f"Oracle returned {type(payload).__name__}, expected object")
    return payload


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [str(item).strip() for item in value if str(item).strip()]


def parse_question(item: Any, index: int) -> Optional[Question]:
    """Build a generated Question from one oracle entry.

    Entries may be bare strings or {text, type, options} objects. Unknown
    types become text; a select without options is downgraded to text.
    Entries without text are skipped.
    """
    if isinstance(item, str):
        item = {"text": item}
    if not isinstance(item, dict):
        return None

    text = str(item.get("text") or "").strip()
    if not text:
        return None

    try:
        question_type = QuestionType(str(item.get("type", "text")).strip().lower())
    except ValueError:
        question_type = QuestionType.TEXT

    options = tuple(_string_list(item.get("options")) or ())
    if question_type in _OPTION_TYPES and not options:
        question_type = QuestionType.TEXT
    if question_type not in _OPTION_TYPES:
        options = ()

    return Question(
        id=f"diagnostic_{index}",
        text=text,
        type=question_type,
        options=options or None,
        source=QuestionSource.GENERATED,
    )


def parse_suggestions(raw: str) -> Tuple[DiagnosticSuggestions, List[str]]:
    """Parse the oracle's JSON, substituting safe defaults field by field.

    Args:
        raw: Model output text

    Returns:
        (suggestions, names of fields that were missing or unusable)

    Raises:
        OracleUnavailable: If the output is not a JSON object
    """
    payload = load_json_object(raw)
    missing: List[str] = []

    raw_questions = payload.get("diagnosticQuestions")
    questions: List[Question] = []
    if isinstance(raw_questions, list):
        for item in raw_questions:
            question = parse_question(item, len(questions) + 1)
            if question is not None:
                questions.append(question)
    else:
        missing.append("diagnosticQuestions")

    lists: Dict[str, List[str]] = {}
    for name in ("potentialDiseases", "redFlags", "recommendations"):
        value = _string_list(payload.get(name))
        if value is None:
            missing.append(name)
        lists[name] = value or []

    summary = payload.get("patientSummary")
    if not isinstance(summary, str):
        missing.append("patientSummary")
        summary = ""

    suggestions = DiagnosticSuggestions(
        diagnostic_questions=questions,
        potential_diseases=lists["potentialDiseases"],
        red_flags=lists["redFlags"],
        recommendations=lists["recommendations"],
        patient_summary=summary.strip(),
    )
    return suggestions, missing


class QuestionOracle:
    """Requests diagnostic questions for a symptom list."""

    def __init__(self, llm: BaseLLM, config: Optional[OracleConfig] = None):
        """Initialize oracle.

        Args:
            llm: LLM used for suggestions
            config: Model and budget configuration
        """
        self.llm = llm
        self.config = config or OracleConfig()

    async def request_diagnostic_questions(
        self,
        symptoms: Sequence[str],
        age: Optional[int] = None,
        gender: Optional[str] = None,
        phq9: Optional[PHQ9Response] = None,
    ) -> DiagnosticSuggestions:
        """Ask the model for diagnostic questions and assessment notes.

        Args:
            symptoms: Symptom names as entered
            age: Patient age, if known
            gender: Patient gender, if known
            phq9: PHQ-9 answers, if collected

        Returns:
            Parsed suggestions (questions not yet duplicate-filtered)

        Raises:
            OracleUnavailable: On transport failure or unparseable output
            OracleMalformed: If fields are missing; `partial` holds the
                defaulted result
        """
        prompt = build_diagnostic_prompt(symptoms, age, gender, phq9)

        try:
            response = await self.llm.generate(
                prompt,
                system_prompt=DIAGNOSTIC_SYSTEM_PROMPT,
                model=self.config.model_name,
            )
        except Exception as e:
            raise OracleUnavailable(f"Oracle request failed: {type(e).__name__}: {e}") from e

        suggestions, missing = parse_suggestions(response.text)

        logger.info(
            "ORACLE_SUGGESTIONS_PARSED",
            extra={
                "model": response.model,
                "question_count": len(suggestions.diagnostic_questions),
                "missing_fields": missing,
                "latency_ms": response.latency_ms,
            }
        )

        if missing:
            raise OracleMalformed(missing, partial=suggestions)
        return suggestions
