"""Doctor-facing analysis of a submitted questionnaire.

The oracle analysis is preferred. On any oracle failure a deterministic
analysis is built from the questionnaire itself, so submission never
fails because the model is unavailable.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from medintake.shared.errors import OracleUnavailable
from medintake.shared.models import (
    AIAnalysis,
    PHQ9Response,
    Questionnaire,
    RiskLevel,
)
from medintake.shared.utils import hash_pii
from medintake.services.question_service.context_builder import build_context
from medintake.services.question_service.rule_engine import RuleEngine
from medintake.services.summary_service.narrative import build_narrative_summary
from .base_llm import BaseLLM
from .config import OracleConfig
from .prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from .question_oracle import load_json_object
from .suggestion_service import ResponseSource

logger = logging.getLogger(__name__)


DEFAULT_SUMMARY = "Analysis completed"
DEFAULT_URGENCY_SCORE = 5

# Number of contextual questions suggested to the doctor in a fallback analysis
FALLBACK_FOLLOW_UP_LIMIT = 5

FALLBACK_DOCTOR_NOTES = (
    "Automated analysis unavailable; this summary was generated directly "
    "from the questionnaire responses."
)


@dataclass(frozen=True)
class AnalysisResult:
    analysis: AIAnalysis
    source: ResponseSource


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _urgency(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_URGENCY_SCORE
    return max(1, min(10, int(round(value))))


def parse_analysis(raw: str) -> Tuple[AIAnalysis, List[str]]:
    """Parse the oracle's analysis JSON with field-by-field defaults.

    Returns:
        (analysis, names of fields that were missing or unusable)

    Raises:
        OracleUnavailable: If the output is not a JSON object
    """
    payload: Dict[str, Any] = load_json_object(raw)
    missing = [
        name for name in (
            "summary", "riskLevel", "keySymptoms", "recommendations",
            "followUpQuestions", "doctorNotes", "urgencyScore",
        )
        if name not in payload
    ]

    try:
        risk_level = RiskLevel(str(payload.get("riskLevel", "")).strip().lower())
    except ValueError:
        risk_level = RiskLevel.MODERATE
        if "riskLevel" not in missing:
            missing.append("riskLevel")

    summary = payload.get("summary")
    notes = payload.get("doctorNotes")
    analysis = AIAnalysis(
        summary=summary.strip() if isinstance(summary, str) and summary.strip() else DEFAULT_SUMMARY,
        risk_level=risk_level,
        key_symptoms=_string_list(payload.get("keySymptoms")),
        recommendations=_string_list(payload.get("recommendations")),
        follow_up_questions=_string_list(payload.get("followUpQuestions")),
        doctor_notes=notes.strip() if isinstance(notes, str) else "",
        urgency_score=_urgency(payload.get("urgencyScore")),
    )
    return analysis, missing


def fallback_risk(max_severity: int, phq9: Optional[PHQ9Response]) -> Tuple[RiskLevel, int]:
    """Risk level and urgency score from severity and PHQ-9 alone."""
    score = phq9.score if phq9 else 0
    if (phq9 and phq9.q9 > 0) or max_severity >= 9:
        return RiskLevel.URGENT, 9
    if max_severity >= 7 or score >= 15:
        return RiskLevel.HIGH, 7
    if max_severity >= 4 or score >= 10:
        return RiskLevel.MODERATE, 5
    return RiskLevel.LOW, 3


def fallback_analysis(
    questionnaire: Questionnaire,
    rule_engine: Optional[RuleEngine] = None,
) -> AIAnalysis:
    """Deterministic analysis used when the oracle is unavailable."""
    rule_engine = rule_engine or RuleEngine()
    symptoms = [s for s in questionnaire.symptoms if s.is_filled]
    context = build_context(
        questionnaire.patient_info,
        symptoms,
        questionnaire.health_metrics,
        questionnaire.phq9,
    )
    risk_level, urgency = fallback_risk(context.max_severity, questionnaire.phq9)

    ranked = sorted(symptoms, key=lambda s: -s.severity)
    recommendations = ["Consult a healthcare provider for proper diagnosis."]
    if risk_level == RiskLevel.URGENT:
        recommendations.insert(0, "Seek prompt medical attention.")
    if context.phq9_score >= 10 or context.mood_concerns:
        recommendations.append("Discuss mood symptoms with a mental health professional.")

    return AIAnalysis(
        summary=build_narrative_summary(
            symptoms, questionnaire.responses, questionnaire.phq9
        ) if symptoms else DEFAULT_SUMMARY,
        risk_level=risk_level,
        key_symptoms=[s.type for s in ranked[:3]],
        recommendations=recommendations,
        follow_up_questions=rule_engine.select(context)[:FALLBACK_FOLLOW_UP_LIMIT],
        doctor_notes=FALLBACK_DOCTOR_NOTES,
        urgency_score=urgency,
    )


class PatientAnalyzer:
    """Analyzes a questionnaire with the oracle, falling back locally."""

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        config: Optional[OracleConfig] = None,
        rule_engine: Optional[RuleEngine] = None,
    ):
        self.llm = llm
        self.config = config or OracleConfig()
        self.rule_engine = rule_engine or RuleEngine()

    async def analyze(self, questionnaire: Questionnaire) -> AnalysisResult:
        """Produce the doctor-facing analysis.

        Args:
            questionnaire: Validated questionnaire

        Returns:
            AnalysisResult; source is FALLBACK when the oracle was not used
        """
        patient_hash = hash_pii(questionnaire.patient_info.medical_id or questionnaire.patient_info.name)

        if self.llm is None:
            return self._fallback(questionnaire, patient_hash, reason="oracle_disabled")

        try:
            response = await asyncio.wait_for(
                self.llm.generate(
                    build_analysis_prompt(questionnaire),
                    system_prompt=ANALYSIS_SYSTEM_PROMPT,
                    model=self.config.analysis_model_name,
                ),
                timeout=self.config.timeout_seconds,
            )
            analysis, missing = parse_analysis(response.text)
        except asyncio.TimeoutError:
            return self._fallback(questionnaire, patient_hash, reason="timeout")
        except OracleUnavailable as e:
            return self._fallback(questionnaire, patient_hash, reason="unparseable", error=e)
        except Exception as e:
            return self._fallback(questionnaire, patient_hash, reason="unavailable", error=e)

        if missing:
            logger.warning(
                "ORACLE_ANALYSIS_INCOMPLETE",
                extra={"patient_hash": patient_hash, "missing_fields": missing}
            )

        logger.info(
            "PATIENT_ANALYSIS_COMPLETED",
            extra={
                "patient_hash": patient_hash,
                "source": ResponseSource.LLM_GENERATED.value,
                "risk_level": analysis.risk_level.value,
                "urgency_score": analysis.urgency_score,
            }
        )
        return AnalysisResult(analysis=analysis, source=ResponseSource.LLM_GENERATED)

    def _fallback(
        self,
        questionnaire: Questionnaire,
        patient_hash: str,
        reason: str,
        error: Optional[Exception] = None,
    ) -> AnalysisResult:
        extra = {"patient_hash": patient_hash, "reason": reason}
        if error is not None:
            extra["error"] = str(error)
            extra["error_type"] = type(error).__name__
        log = logger.info if reason == "oracle_disabled" else logger.warning
        log("FALLBACK_ANALYSIS_USED", extra=extra)

        return AnalysisResult(
            analysis=fallback_analysis(questionnaire, self.rule_engine),
            source=ResponseSource.FALLBACK,
        )
