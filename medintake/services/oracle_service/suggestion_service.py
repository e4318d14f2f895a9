"""Diagnostic suggestions with local fallback.

The oracle is never trusted to be available. Any failure (no key, timeout,
transport error, unparseable or incomplete output) falls through to the
contextual rule engine, and whichever question list is used always passes
the duplicate filter before it is returned.

SuggestionCoordinator adds last-request-wins on top: a new request cancels
the one in flight and a superseded response is discarded.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Union

from medintake.shared.errors import OracleMalformed, OracleUnavailable, ValidationError
from medintake.shared.models import (
    BodySystem,
    DiagnosticSuggestions,
    HealthMetrics,
    PatientContext,
    PatientInfo,
    PHQ9Response,
    Question,
    Symptom,
)
from medintake.services.question_service.context_builder import build_context
from medintake.services.question_service.dedup_filter import filter_duplicates
from medintake.services.question_service.question_bank import HARDCODED_QUESTIONS
from medintake.services.question_service.rule_engine import RuleEngine
from medintake.services.summary_service.narrative import build_narrative_summary, filled_items
from .config import OracleConfig
from .question_oracle import QuestionOracle

logger = logging.getLogger(__name__)


class ResponseSource(Enum):
    """Where the returned questions came from."""
    LLM_GENERATED = "llm_generated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class SuggestionResult:
    """Suggestions plus provenance. fallback_reason is for logs only."""
    suggestions: DiagnosticSuggestions
    source: ResponseSource
    fallback_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "data": self.suggestions.to_dict(),
            "source": self.source.value,
        }


FALLBACK_RECOMMENDATIONS = (
    "Discuss these symptoms with a healthcare provider for proper evaluation.",
)


def fallback_red_flags(context: PatientContext) -> List[str]:
    flags = []
    if context.self_harm_risk:
        flags.append("Thoughts of self-harm reported on PHQ-9 item 9")
    if context.max_severity >= 8:
        flags.append(f"Severe symptom intensity reported ({context.max_severity}/10)")
    if BodySystem.CARDIOVASCULAR in context.affected_systems:
        flags.append("Cardiovascular symptoms reported")
    return flags


class SuggestionService:
    """Produces diagnostic suggestions, from the oracle when it cooperates."""

    def __init__(
        self,
        oracle: Optional[QuestionOracle] = None,
        rule_engine: Optional[RuleEngine] = None,
        config: Optional[OracleConfig] = None,
        bank: Sequence[str] = HARDCODED_QUESTIONS,
    ):
        """Initialize service.

        Args:
            oracle: Question oracle; None means always use the fallback
            rule_engine: Contextual engine for fallback questions
            config: Oracle budget configuration
            bank: Question texts generated questions must not repeat
        """
        self.oracle = oracle
        self.rule_engine = rule_engine or RuleEngine()
        self.config = config or OracleConfig()
        self.bank = tuple(bank)

        logger.info(
            "SUGGESTION_SERVICE_INITIALIZED",
            extra={
                "oracle_enabled": oracle is not None,
                "timeout_seconds": self.config.timeout_seconds,
            }
        )

    async def suggest(
        self,
        symptoms: Sequence[Union[Symptom, str]],
        patient_info: Optional[PatientInfo] = None,
        metrics: Optional[HealthMetrics] = None,
        phq9: Optional[PHQ9Response] = None,
        responses: Optional[Mapping[str, str]] = None,
    ) -> SuggestionResult:
        """Get diagnostic suggestions for the current symptoms.

        Never raises for oracle problems; those produce a FALLBACK result.

        Args:
            symptoms: Symptom rows or bare names; blank entries are ignored.
                Bare names reach the narrative without row details
            patient_info: Demographics (age and gender reach the oracle)
            metrics: Health metrics for the fallback context
            phq9: PHQ-9 answers
            responses: Default-question answers for the fallback summary

        Returns:
            SuggestionResult with duplicate-filtered questions

        Raises:
            ValidationError: If no symptom row has a type
        """
        items = filled_items(symptoms)
        if not items:
            raise ValidationError.single("currentSymptoms", "No valid symptoms provided")
        filled = [s if isinstance(s, Symptom) else Symptom(type=s) for s in items]

        patient_info = patient_info or PatientInfo()
        context = build_context(patient_info, filled, metrics, phq9)

        if self.oracle is None:
            return self._fallback(context, items, phq9, responses, reason="oracle_disabled")

        try:
            suggestions = await asyncio.wait_for(
                self.oracle.request_diagnostic_questions(
                    [s.type for s in filled],
                    age=context.age or None,
                    gender=patient_info.gender or None,
                    phq9=phq9,
                ),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._log_failure("timeout", None)
            return self._fallback(context, items, phq9, responses, reason="timeout")
        except OracleMalformed as e:
            self._log_failure("malformed", e)
            if e.partial is None:
                return self._fallback(context, items, phq9, responses, reason="malformed")
            suggestions = e.partial
        except OracleUnavailable as e:
            self._log_failure("unavailable", e)
            return self._fallback(context, items, phq9, responses, reason="unavailable")

        questions = filter_duplicates(suggestions.diagnostic_questions, self.bank)
        if not questions:
            logger.warning(
                "ORACLE_QUESTIONS_ALL_FILTERED",
                extra={"oracle_question_count": len(suggestions.diagnostic_questions)}
            )
            fallback = self._fallback(context, items, phq9, responses, reason="no_questions_left")
            return replace(
                fallback,
                suggestions=replace(
                    suggestions,
                    diagnostic_questions=fallback.suggestions.diagnostic_questions,
                    patient_summary=suggestions.patient_summary or fallback.suggestions.patient_summary,
                ),
            )

        if not suggestions.patient_summary:
            suggestions = replace(
                suggestions,
                patient_summary=build_narrative_summary(items, responses, phq9),
            )

        logger.info(
            "SUGGESTIONS_GENERATED",
            extra={
                "source": ResponseSource.LLM_GENERATED.value,
                "question_count": len(questions),
                "dropped_duplicates": len(suggestions.diagnostic_questions) - len(questions),
            }
        )
        return SuggestionResult(
            suggestions=replace(suggestions, diagnostic_questions=questions),
            source=ResponseSource.LLM_GENERATED,
        )

    def _fallback(
        self,
        context: PatientContext,
        symptoms: Sequence[Union[Symptom, str]],
        phq9: Optional[PHQ9Response],
        responses: Optional[Mapping[str, str]],
        reason: str,
    ) -> SuggestionResult:
        questions: List[Question] = filter_duplicates(
            self.rule_engine.contextual_questions(context),
            self.bank,
        )
        suggestions = DiagnosticSuggestions(
            diagnostic_questions=questions,
            potential_diseases=[],
            red_flags=fallback_red_flags(context),
            recommendations=list(FALLBACK_RECOMMENDATIONS),
            patient_summary=build_narrative_summary(symptoms, responses, phq9),
        )

        logger.info(
            "FALLBACK_SUGGESTIONS_USED",
            extra={"reason": reason, "question_count": len(questions)}
        )
        return SuggestionResult(
            suggestions=suggestions,
            source=ResponseSource.FALLBACK,
            fallback_reason=reason,
        )

    def _log_failure(self, reason: str, error: Optional[Exception]) -> None:
        extra = {"reason": reason, "timeout_seconds": self.config.timeout_seconds}
        if error is not None:
            extra["error"] = str(error)
            extra["error_type"] = type(error).__name__
        logger.warning("ORACLE_REQUEST_FAILED", extra=extra)


class SuggestionCoordinator:
    """Last-request-wins wrapper around SuggestionService.

    Each request bumps a generation counter and cancels the request in
    flight. A response whose generation is no longer current is discarded
    and the caller gets None.
    """

    def __init__(self, service: SuggestionService):
        self.service = service
        self._generation = 0
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    async def request(self, *args, **kwargs) -> Optional[SuggestionResult]:
        """Start a suggestion request, superseding any earlier one.

        Arguments are passed to SuggestionService.suggest().

        Returns:
            The result, or None if a newer request started meanwhile
        """
        self._generation += 1
        generation = self._generation

        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()

        task = asyncio.ensure_future(self.service.suggest(*args, **kwargs))
        self._in_flight = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return None
            raise

        if generation != self._generation:
            logger.info(
                "STALE_SUGGESTIONS_DISCARDED",
                extra={"generation": generation, "current_generation": self._generation}
            )
            return None
        return result
