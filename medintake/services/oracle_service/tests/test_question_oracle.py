"""Tests for oracle response parsing and the question oracle."""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from medintake.shared.errors import OracleMalformed, OracleUnavailable
from medintake.shared.models import QuestionSource, QuestionType
from medintake.services.oracle_service.base_llm import BaseLLM, LLMResponse
from medintake.services.oracle_service.config import OracleConfig
from medintake.services.oracle_service.question_oracle import (
    QuestionOracle,
    parse_question,
    parse_suggestions,
)


COMPLETE_RESPONSE = {
    "diagnosticQuestions": [
        {"text": "Does the headache wake you from sleep?", "type": "yesno"},
        {
            "text": "Where is the pain strongest?",
            "type": "select",
            "options": ["Temples", "Behind the eyes", "Back of head"],
        },
    ],
    "potentialDiseases": ["Migraine", "Tension-type headache"],
    "redFlags": ["Sudden onset"],
    "recommendations": ["Keep a headache diary"],
    "patientSummary": "Adult with recurring headaches.",
}


def llm_returning(text: str) -> MagicMock:
    llm = MagicMock(spec=BaseLLM)
    llm.generate = AsyncMock(return_value=LLMResponse(
        text=text,
        model="gpt-4o-mini",
        provider="openai",
        latency_ms=120.0,
    ))
    return llm


class TestParseQuestion:
    """Tests for single-entry parsing."""

    def test_bare_string(self):
        question = parse_question("Any fever?", 1)

        assert question.id == "diagnostic_1"
        assert question.type == QuestionType.TEXT
        assert question.source == QuestionSource.GENERATED

    def test_unknown_type_becomes_text(self):
        assert parse_question({"text": "Rate it", "type": "slider"}, 1).type == QuestionType.TEXT

    def test_select_without_options_becomes_text(self):
        question = parse_question({"text": "Which side?", "type": "select"}, 1)

        assert question.type == QuestionType.TEXT
        assert question.options is None

    def test_options_dropped_for_yesno(self):
        question = parse_question({"text": "Any fever?", "type": "YesNo", "options": ["Yes", "No"]}, 1)

        assert question.type == QuestionType.YESNO
        assert question.options is None

    @pytest.mark.parametrize("item", [{"type": "text"}, {"text": "  "}, 42, None])
    def test_entries_without_text_skipped(self, item):
        assert parse_question(item, 1) is None


class TestParseSuggestions:
    """Tests for parse_suggestions()."""

    def test_complete_response(self):
        suggestions, missing = parse_suggestions(json.dumps(COMPLETE_RESPONSE))

        assert missing == []
        assert [q.id for q in suggestions.diagnostic_questions] == ["diagnostic_1", "diagnostic_2"]
        assert suggestions.diagnostic_questions[1].options == ("Temples", "Behind the eyes", "Back of head")
        assert suggestions.potential_diseases == ["Migraine", "Tension-type headache"]
        assert suggestions.patient_summary == "Adult with recurring headaches."

    def test_missing_fields_defaulted(self):
        suggestions, missing = parse_suggestions(json.dumps({"potentialDiseases": ["Migraine"]}))

        assert set(missing) == {"diagnosticQuestions", "redFlags", "recommendations", "patientSummary"}
        assert suggestions.diagnostic_questions == []
        assert suggestions.red_flags == []
        assert suggestions.patient_summary == ""
        assert suggestions.potential_diseases == ["Migraine"]

    def test_wrong_field_type_counts_as_missing(self):
        _, missing = parse_suggestions(json.dumps({**COMPLETE_RESPONSE, "redFlags": "none"}))
        assert missing == ["redFlags"]

    def test_invalid_entries_do_not_leave_id_gaps(self):
        payload = {**COMPLETE_RESPONSE, "diagnosticQuestions": [{"type": "text"}, "Any fever?"]}

        suggestions, _ = parse_suggestions(json.dumps(payload))

        assert [q.id for q in suggestions.diagnostic_questions] == ["diagnostic_1"]

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", "", "null"])
    def test_unparseable_output_raises(self, raw):
        with pytest.raises(OracleUnavailable):
            parse_suggestions(raw)


@pytest.mark.asyncio
class TestQuestionOracle:
    """Tests for QuestionOracle.request_diagnostic_questions()."""

    async def test_successful_request(self):
        llm = llm_returning(json.dumps(COMPLETE_RESPONSE))
        oracle = QuestionOracle(llm, OracleConfig(model_name="gpt-test"))

        suggestions = await oracle.request_diagnostic_questions(["headache"], age=34, gender="female")

        assert len(suggestions.diagnostic_questions) == 2
        prompt = llm.generate.call_args.args[0]
        assert "Symptoms: headache" in prompt
        assert "Age 34, Gender female" in prompt
        assert llm.generate.call_args.kwargs["model"] == "gpt-test"

    async def test_unknown_demographics(self):
        llm = llm_returning(json.dumps(COMPLETE_RESPONSE))

        await QuestionOracle(llm).request_diagnostic_questions(["cough"])

        assert "Age unknown, Gender unknown" in llm.generate.call_args.args[0]

    async def test_missing_fields_raise_malformed_with_partial(self):
        payload = {k: v for k, v in COMPLETE_RESPONSE.items() if k != "patientSummary"}
        oracle = QuestionOracle(llm_returning(json.dumps(payload)))

        with pytest.raises(OracleMalformed) as exc:
            await oracle.request_diagnostic_questions(["headache"])

        assert exc.value.missing_fields == ["patientSummary"]
        assert len(exc.value.partial.diagnostic_questions) == 2

    async def test_transport_error_is_unavailable(self):
        llm = MagicMock(spec=BaseLLM)
        llm.generate = AsyncMock(side_effect=ConnectionError("connection reset"))

        with pytest.raises(OracleUnavailable) as exc:
            await QuestionOracle(llm).request_diagnostic_questions(["headache"])

        assert not isinstance(exc.value, OracleMalformed)

    async def test_garbage_is_unavailable(self):
        oracle = QuestionOracle(llm_returning("Sorry, I can't help with that."))

        with pytest.raises(OracleUnavailable):
            await oracle.request_diagnostic_questions(["headache"])
