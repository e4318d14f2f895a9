"""Prompt templates for the oracle.

Both prompts ask for a single JSON object; the parsers in
question_oracle.py and patient_analyzer.py substitute defaults for any
field the model leaves out.
"""
import json
from dataclasses import asdict
from typing import Any, Dict, Optional, Sequence

from medintake.shared.models import PHQ9Response, Questionnaire
from medintake.services.summary_service.severity import phq9_band


DIAGNOSTIC_SYSTEM_PROMPT = """You are a medical intake assistant helping a clinician prepare for a visit.
You never diagnose the patient directly. Respond only with a single JSON object."""


# Topics already covered by the default intake questions
COVERED_TOPICS = (
    "Current medications, supplements, or vitamins",
    "Allergies to medications, foods, or environmental factors",
    "Previous episodes of similar symptoms",
    "Previous treatments and their effectiveness",
    "Main concerns about symptoms",
)


DIAGNOSTIC_PROMPT_TEMPLATE = """PATIENT PRESENTATION:
Symptoms: {symptoms}
Demographics: Age {age}, Gender {gender}
{phq9_line}
Do NOT generate questions about the following topics; they are already covered by the standard questionnaire:
{covered_topics}

Generate specific, targeted diagnostic questions based on the patient's symptoms. The questions should help:
- Refine the differential diagnosis
- Assess symptom characteristics (onset, duration, severity, triggers, relieving factors)
- Evaluate associated and constitutional symptoms
- Gather relevant history and risk factors
- Identify red flags and warning signs

Respond with JSON in exactly this shape:
{{
  "diagnosticQuestions": [
    {{"text": "Question text", "type": "text|yesno|select|multiselect", "options": ["option1", "option2"]}}
  ],
  "potentialDiseases": ["Specific diagnosis 1", "Specific diagnosis 2"],
  "redFlags": ["Specific red flag 1"],
  "recommendations": ["Specific recommendation 1"],
  "patientSummary": "One concise paragraph summarizing the presentation and key findings."
}}"""


ANALYSIS_SYSTEM_PROMPT = """You are a medical AI assistant helping doctors analyze patient symptoms.
Provide structured analysis in JSON format. Be thorough but concise.
Always recommend seeing a healthcare provider for proper diagnosis."""


ANALYSIS_PROMPT_TEMPLATE = """Analyze this patient data and return JSON with these fields:
- summary: Brief overview of patient condition
- riskLevel: "low", "moderate", "high", or "urgent"
- keySymptoms: Array of most concerning symptoms
- recommendations: Array of care recommendations
- followUpQuestions: Array of questions the doctor should ask
- doctorNotes: Important notes for the healthcare provider
- urgencyScore: Number 1-10 indicating urgency

Patient Data:
Age: {age}
Symptoms: {symptoms}
Pain Locations: {pain_locations}
Health Metrics: {health_metrics}
{phq9_line}
Additional Notes: {notes}"""


def _phq9_line(phq9: Optional[PHQ9Response]) -> str:
    if phq9 is None:
        return ""
    return f"PHQ-9: score {phq9.score}/27 ({phq9_band(phq9.score).value}), item 9 = {phq9.q9}\n"


def build_diagnostic_prompt(
    symptoms: Sequence[str],
    age: Optional[int] = None,
    gender: Optional[str] = None,
    phq9: Optional[PHQ9Response] = None,
) -> str:
    """Prompt for the diagnostic-question request.

    Only symptom names, age and gender are sent; no identifiers.
    """
    return DIAGNOSTIC_PROMPT_TEMPLATE.format(
        symptoms=", ".join(symptoms),
        age=age if age else "unknown",
        gender=gender or "unknown",
        phq9_line=_phq9_line(phq9),
        covered_topics="\n".join(f"- {topic}" for topic in COVERED_TOPICS),
    )


def _jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, default=lambda v: getattr(v, "value", str(v))))


def build_analysis_prompt(questionnaire: Questionnaire) -> str:
    """Prompt for the doctor-facing analysis.

    Patient name, contact details and medical id are left out.
    """
    symptoms = [_jsonable(asdict(s)) for s in questionnaire.symptoms]
    pain_locations = [_jsonable(asdict(p)) for p in questionnaire.pain_locations]
    health_metrics: Dict[str, Any] = _jsonable(asdict(questionnaire.health_metrics))
    return ANALYSIS_PROMPT_TEMPLATE.format(
        age=questionnaire.patient_info.age_on() or "unknown",
        symptoms=json.dumps(symptoms),
        pain_locations=json.dumps(pain_locations),
        health_metrics=json.dumps(health_metrics),
        phq9_line=_phq9_line(questionnaire.phq9),
        notes=questionnaire.additional_notes or "None",
    )
