"""Static question bank.

Two declarative sets:
- DEFAULT_QUESTIONS: asked of every patient, with conditional follow-ups
- SYMPTOM_QUESTIONS: keyed by symptom type, asked when the symptom is reported

The follow_up edges here are the only source of conditional visibility;
see visibility.py.
"""
from typing import Dict, Iterable, List, Tuple

from medintake.shared.models import Question, QuestionType
from .taxonomy import normalize_symptom_key


DEFAULT_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id="medications",
        text="Are you currently taking any medications (including over-the-counter drugs, vitamins, or supplements)?",
        type=QuestionType.YESNO,
        required=True,
        follow_up={"Yes": ("medication_list",)},
    ),
    Question(
        id="medication_list",
        text="Please list all medications you are currently taking:",
        required=True,
    ),
    Question(
        id="allergies",
        text="Do you have any known allergies to medications, foods, or environmental factors?",
        type=QuestionType.YESNO,
        required=True,
        follow_up={"Yes": ("allergy_list",)},
    ),
    Question(
        id="allergy_list",
        text="Please describe your allergies and reactions:",
        required=True,
    ),
    Question(
        id="previous_episodes",
        text="Have you experienced similar symptoms before?",
        type=QuestionType.YESNO,
        required=True,
        follow_up={"Yes": ("previous_treatment",)},
    ),
    Question(
        id="previous_treatment",
        text="What treatment did you receive previously and was it effective?",
        required=True,
    ),
    Question(
        id="main_concern",
        text="What is your main concern about these symptoms?",
        required=True,
    ),
)


SYMPTOM_QUESTIONS: Dict[str, Tuple[Question, ...]] = {
    "headache": (
        Question(
            id="headache_worst",
            text="Is this the worst headache you have ever experienced?",
            type=QuestionType.YESNO,
            required=True,
            follow_up={"Yes": ("headache_emergency",)},
        ),
        Question(
            id="headache_emergency",
            text="Do you have neck stiffness, fever, sensitivity to light, vision changes, or confusion?",
            type=QuestionType.MULTISELECT,
            options=("Neck stiffness", "Fever", "Sensitivity to light", "Vision changes", "Confusion", "None"),
            required=True,
        ),
        Question(
            id="headache_triggers",
            text="What triggers your headaches?",
            type=QuestionType.MULTISELECT,
            options=("Stress", "Lack of sleep", "Certain foods", "Bright lights", "Weather changes", "Unknown"),
            required=True,
        ),
        Question(
            id="headache_location",
            text="Where is the headache located?",
            type=QuestionType.SELECT,
            options=("One side of head", "Both sides", "Forehead", "Back of head", "Top of head", "Around eyes"),
            required=True,
        ),
    ),
    "chest pain": (
        Question(
            id="chest_quality",
            text="How would you describe the chest pain?",
            type=QuestionType.MULTISELECT,
            options=("Crushing/squeezing", "Sharp/stabbing", "Burning", "Dull ache", "Pressure"),
            required=True,
        ),
        Question(
            id="chest_radiation",
            text="Does the pain spread to other areas?",
            type=QuestionType.MULTISELECT,
            options=("Left arm", "Right arm", "Jaw", "Neck", "Back", "Stomach", "No spread"),
            required=True,
        ),
        Question(
            id="chest_breathing",
            text="Are you having difficulty breathing?",
            type=QuestionType.YESNO,
            required=True,
        ),
        Question(
            id="chest_family_history",
            text="Family history of heart disease?",
            type=QuestionType.SELECT,
            options=("Yes", "No", "Unknown"),
            required=True,
        ),
    ),
    "fatigue": (
        Question(
            id="fatigue_duration",
            text="How long have you been experiencing fatigue?",
            type=QuestionType.SELECT,
            options=("Days", "Weeks", "Months", "Years"),
            required=True,
        ),
        Question(
            id="fatigue_rest",
            text="Does rest improve your energy?",
            type=QuestionType.SELECT,
            options=("Yes, significantly", "Somewhat", "No improvement", "Makes it worse"),
            required=True,
        ),
        Question(
            id="fatigue_weight",
            text="Any unexplained weight changes?",
            type=QuestionType.SELECT,
            options=("Weight loss", "Weight gain", "No change"),
            follow_up={
                "Weight loss": ("weight_details",),
                "Weight gain": ("weight_details",),
            },
        ),
        Question(
            id="weight_details",
            text="How much weight change and over what period?",
        ),
    ),
    "nausea": (
        Question(
            id="nausea_vomiting",
            text="Are you vomiting?",
            type=QuestionType.YESNO,
            required=True,
            follow_up={"Yes": ("vomit_frequency",)},
        ),
        Question(
            id="vomit_frequency",
            text="How often are you vomiting?",
            type=QuestionType.SELECT,
            options=("Once daily", "Multiple times daily", "Few times weekly", "Rarely"),
        ),
        Question(
            id="nausea_triggers",
            text="What triggers the nausea?",
            type=QuestionType.MULTISELECT,
            options=("Eating", "Smells", "Motion", "Stress", "Morning", "No trigger identified"),
        ),
        Question(
            id="nausea_fluids",
            text="Can you keep fluids down?",
            type=QuestionType.SELECT,
            options=("Yes, easily", "Sometimes", "Rarely", "No"),
            required=True,
        ),
    ),
}


# Texts of the questions every patient already answers. Generated questions
# are checked against these before display.
HARDCODED_QUESTIONS: Tuple[str, ...] = tuple(q.text for q in DEFAULT_QUESTIONS)


def questions_for_symptoms(symptom_types: Iterable[str]) -> List[Question]:
    """Symptom-specific questions for the reported symptoms, in report order.

    Each symptom's questions are included once even if the symptom is
    reported on more than one row.
    """
    questions: List[Question] = []
    seen = set()
    for symptom_type in symptom_types:
        key = normalize_symptom_key(symptom_type)
        if key in seen:
            continue
        seen.add(key)
        questions.extend(SYMPTOM_QUESTIONS.get(key, ()))
    return questions


def find_question(question_id: str) -> Question:
    """Look up a static question by id.

    Raises:
        KeyError: If no static question has that id
    """
    for question in all_static_questions():
        if question.id == question_id:
            return question
    raise KeyError(question_id)


def all_static_questions() -> List[Question]:
    questions = list(DEFAULT_QUESTIONS)
    for group in SYMPTOM_QUESTIONS.values():
        questions.extend(group)
    return questions
