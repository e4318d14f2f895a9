"""Oracle Service: LLM-backed suggestions behind a local fallback.

The oracle is an unreliable external dependency. Callers always get a
usable result: oracle failures are logged and replaced by rule-engine
questions or a deterministic analysis, never surfaced to the patient.

Components:
- base_llm.py: BaseLLM interface and OpenAI implementation
- config.py: OracleConfig (key, models, time budget)
- prompts.py: prompt templates
- question_oracle.py: diagnostic question request and response parsing
- suggestion_service.py: fallback, duplicate filtering, last-request-wins
- patient_analyzer.py: doctor-facing analysis with deterministic fallback
"""
from typing import Optional

from .base_llm import BaseLLM, LLMConfig, LLMProvider, LLMResponse, OpenAILLM, create_llm
from .config import OracleConfig
from .question_oracle import QuestionOracle, parse_suggestions
from .suggestion_service import (
    ResponseSource,
    SuggestionCoordinator,
    SuggestionResult,
    SuggestionService,
)
from .patient_analyzer import AnalysisResult, PatientAnalyzer, fallback_analysis, parse_analysis


def create_oracle_llm(config: OracleConfig) -> Optional[BaseLLM]:
    """LLM client for the configured key, or None when the oracle is disabled."""
    if not config.enabled:
        return None
    return create_llm(LLMConfig(
        provider=LLMProvider.OPENAI,
        model_name=config.model_name,
        api_key=config.api_key,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        timeout_seconds=config.timeout_seconds,
    ))


__all__ = [
    "BaseLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
    "create_oracle_llm",
    "OracleConfig",
    "QuestionOracle",
    "parse_suggestions",
    "ResponseSource",
    "SuggestionCoordinator",
    "SuggestionResult",
    "SuggestionService",
    "AnalysisResult",
    "PatientAnalyzer",
    "fallback_analysis",
    "parse_analysis",
]
