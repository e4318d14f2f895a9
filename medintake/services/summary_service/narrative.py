"""Narrative patient summary built without the oracle.

Used for the summary-only request and whenever the oracle is unavailable.
Identical inputs always produce byte-identical text.
"""
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from medintake.shared.models import PHQ9Response, Symptom
from .severity import format_unit, phq9_band, phq9_score


def filled_items(symptoms: Iterable[Union[Symptom, str]]) -> List[Union[Symptom, str]]:
    """Drop blank rows and names; bare names are stripped and stay bare."""
    items: List[Union[Symptom, str]] = []
    for symptom in symptoms:
        if isinstance(symptom, str):
            if symptom.strip():
                items.append(symptom.strip())
        elif symptom.is_filled:
            items.append(symptom)
    return items


def describe_symptom(symptom: Union[Symptom, str]) -> str:
    """One symptom as "{type} (severity {s}/10, {frequency}, {n} {unit})".

    A bare name has no recorded details and is rendered as given.
    """
    if isinstance(symptom, str):
        return symptom
    unit = format_unit(symptom.duration_unit, symptom.duration_number)
    return (
        f"{symptom.type} (severity {symptom.severity}/10, "
        f"{symptom.frequency.value}, {symptom.duration_number} {unit})"
    )


def _answered_yes(responses: Mapping[str, str], question_id: str) -> bool:
    return (responses.get(question_id) or "").lower() == "yes"


def build_narrative_summary(
    symptoms: Sequence[Union[Symptom, str]],
    responses: Optional[Mapping[str, str]] = None,
    phq9: Optional[Union[PHQ9Response, Mapping[str, int]]] = None,
) -> str:
    """Assemble the patient summary paragraph.

    Clause order is fixed: symptoms, medications, allergies, previous
    episodes, main concern, PHQ-9. Each optional clause appears only when
    its default question was answered "yes" (case-insensitive); the main
    concern clause appears when the answer is non-empty and the PHQ-9
    clause when the score is above zero.

    Args:
        symptoms: Symptom rows, or bare symptom names
        responses: Answers to the default questions by id
        phq9: PHQ-9 answers

    Returns:
        Summary text with surrounding whitespace trimmed
    """
    responses = responses or {}
    parts = "; ".join(describe_symptom(s) for s in symptoms)
    summary = f"Patient is experiencing: {parts}. "

    if _answered_yes(responses, "medications"):
        summary += f"Current medications include {responses.get('medication_list', '')}. "
    if _answered_yes(responses, "allergies"):
        summary += f"Allergies noted: {responses.get('allergy_list', '')}. "
    if _answered_yes(responses, "previous_episodes"):
        summary += (
            "History of similar episodes; prior treatment: "
            f"{responses.get('previous_treatment', '')}. "
        )
    main_concern = responses.get("main_concern") or ""
    if main_concern:
        summary += f"Primary concern: {main_concern}. "

    score = phq9_score(phq9) if phq9 is not None else 0
    if score > 0:
        summary += f"PHQ-9 score {score}/27 ({phq9_band(score).value})."

    return summary.strip()
