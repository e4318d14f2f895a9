"""Contextual question rule engine.

Rules are (predicate, questions, priority, category) records evaluated
against a PatientContext. Selection:

1. Keep rules whose predicate holds
2. Flatten their questions, keeping each rule's own order
3. Stable sort by priority, highest first
4. Drop repeated texts, keeping the highest-priority occurrence
5. Truncate to max_results

Predicates are plain module-level functions so each one can be tested on
its own. The rule table must contain at least one catch-all rule (predicate
`always`); its questions are what a patient sees when nothing else applies.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from medintake.shared.models import (
    BodySystem,
    PatientContext,
    Question,
    QuestionSource,
    QuestionType,
    Rule,
    RuleCategory,
)
from .config import QuestionConfig

logger = logging.getLogger(__name__)


# =============================================================================
# PREDICATES
# =============================================================================

def always(context: PatientContext) -> bool:
    return True


def is_high_severity(context: PatientContext) -> bool:
    return context.max_severity >= 8


def is_self_harm_risk(context: PatientContext) -> bool:
    return context.self_harm_risk


def _affects(system: BodySystem):
    def predicate(context: PatientContext) -> bool:
        return system in context.affected_systems
    predicate.__name__ = f"affects_{system.value}"
    return predicate


affects_cardiovascular = _affects(BodySystem.CARDIOVASCULAR)
affects_neurological = _affects(BodySystem.NEUROLOGICAL)
affects_respiratory = _affects(BodySystem.RESPIRATORY)
affects_gastrointestinal = _affects(BodySystem.GASTROINTESTINAL)
affects_genitourinary = _affects(BodySystem.GENITOURINARY)
affects_musculoskeletal = _affects(BodySystem.MUSCULOSKELETAL)
affects_constitutional = _affects(BodySystem.CONSTITUTIONAL)


def has_multiple_symptoms(context: PatientContext) -> bool:
    return context.has_multiple_symptoms


def is_poor_sleep(context: PatientContext) -> bool:
    return context.poor_sleep


def is_high_stress(context: PatientContext) -> bool:
    return context.high_stress


def has_mood_concerns(context: PatientContext) -> bool:
    """Self-reported low mood, or a PHQ-9 score in the moderate band or above."""
    return context.mood_concerns or context.phq9_score >= 10


def is_low_energy(context: PatientContext) -> bool:
    return context.low_energy


def is_older_adult(context: PatientContext) -> bool:
    return context.age >= 65


def is_minor(context: PatientContext) -> bool:
    # Age 0 means no age was entered
    return 0 < context.age < 18


def is_possible_pregnancy(context: PatientContext) -> bool:
    return context.gender.strip().lower() == "female" and 12 <= context.age <= 50


# =============================================================================
# RULE TABLE
# =============================================================================

# Question texts must not contain any KEY_PHRASES entry or the duplicate
# filter will drop them on the fallback path.
DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule(
        name="high_severity",
        predicate=is_high_severity,
        questions=(
            "How did your symptoms start, suddenly or gradually?",
            "Are your symptoms preventing you from doing normal daily activities?",
            "Have you gone to an emergency room for this problem in the past week?",
        ),
        priority=10,
        category=RuleCategory.URGENT,
    ),
    Rule(
        name="self_harm_risk",
        predicate=is_self_harm_risk,
        questions=(
            "Are you having thoughts of harming yourself right now?",
            "Do you have someone you can reach out to for support today?",
        ),
        priority=10,
        category=RuleCategory.URGENT,
    ),
    Rule(
        name="cardiovascular",
        predicate=affects_cardiovascular,
        questions=(
            "Does the discomfort get worse with physical exertion?",
            "Do you feel lightheaded or faint when the symptoms occur?",
            "Have you noticed swelling in your ankles or feet?",
        ),
        priority=9,
        category=RuleCategory.URGENT,
    ),
    Rule(
        name="neurological",
        predicate=affects_neurological,
        questions=(
            "Have you had any recent head injury or fall?",
            "Have you noticed weakness or numbness on one side of your body?",
            "Have you had any changes in your vision or speech?",
        ),
        priority=7,
    ),
    Rule(
        name="respiratory",
        predicate=affects_respiratory,
        questions=(
            "Are you coughing up any mucus or blood?",
            "Do you get short of breath when lying flat?",
            "Have you been around anyone with a respiratory infection recently?",
        ),
        priority=7,
    ),
    Rule(
        name="gastrointestinal",
        predicate=affects_gastrointestinal,
        questions=(
            "Have you noticed any blood in your stool or black stools?",
            "Is the discomfort related to eating or specific foods?",
            "Have you traveled recently or eaten anything unusual?",
        ),
        priority=6,
    ),
    Rule(
        name="genitourinary",
        predicate=affects_genitourinary,
        questions=(
            "Have you had a fever along with the urinary symptoms?",
            "Do you have pain in your lower back or side?",
        ),
        priority=6,
    ),
    Rule(
        name="multiple_symptoms",
        predicate=has_multiple_symptoms,
        questions=(
            "Did all of your symptoms start around the same time?",
            "Which symptom bothers you the most?",
        ),
        priority=6,
    ),
    Rule(
        name="musculoskeletal",
        predicate=affects_musculoskeletal,
        questions=(
            "Did the pain begin after an injury or strain?",
            "Is the pain worse in the morning or after activity?",
            "Is there any swelling, redness or warmth at the painful area?",
        ),
        priority=5,
    ),
    Rule(
        name="constitutional",
        predicate=affects_constitutional,
        questions=(
            "Have you measured your temperature at home?",
            "Have you lost weight without trying in the last few months?",
            "Do you wake up at night drenched in sweat?",
        ),
        priority=5,
    ),
    Rule(
        name="mood_concerns",
        predicate=has_mood_concerns,
        questions=(
            "How has your mood affected your work, school or relationships?",
            "Would you like information about talking with a mental health professional?",
        ),
        priority=5,
    ),
    Rule(
        name="older_adult",
        predicate=is_older_adult,
        questions=(
            "Have you had any falls in the past six months?",
            "Do you live alone or with someone who can help you?",
        ),
        priority=5,
        category=RuleCategory.DEMOGRAPHIC,
    ),
    Rule(
        name="minor",
        predicate=is_minor,
        questions=(
            "Is a parent or guardian aware of these symptoms?",
        ),
        priority=5,
        category=RuleCategory.DEMOGRAPHIC,
    ),
    Rule(
        name="possible_pregnancy",
        predicate=is_possible_pregnancy,
        questions=(
            "Is there any chance you could be pregnant?",
            "When was the first day of your last menstrual period?",
        ),
        priority=4,
        category=RuleCategory.DEMOGRAPHIC,
    ),
    Rule(
        name="poor_sleep",
        predicate=is_poor_sleep,
        questions=(
            "Do you snore, or has anyone noticed you stop breathing during sleep?",
            "Do you use screens in bed before going to sleep?",
        ),
        priority=4,
        category=RuleCategory.LIFESTYLE,
    ),
    Rule(
        name="high_stress",
        predicate=is_high_stress,
        questions=(
            "What are the biggest sources of stress in your life right now?",
            "How much caffeine or alcohol do you drink on a typical day?",
        ),
        priority=4,
        category=RuleCategory.LIFESTYLE,
    ),
    Rule(
        name="low_energy",
        predicate=is_low_energy,
        questions=(
            "How many days per week do you get at least 30 minutes of physical activity?",
            "Do you feel rested when you wake up in the morning?",
        ),
        priority=3,
        category=RuleCategory.LIFESTYLE,
    ),
    Rule(
        name="general",
        predicate=always,
        questions=(
            "When do your symptoms typically occur?",
            "Are your symptoms getting better, worse, or staying the same?",
            "How do your symptoms affect your daily activities?",
        ),
        priority=1,
    ),
)


# Answer choices for rule questions that are rendered as a select.
QUESTION_OPTIONS: Dict[str, Tuple[str, ...]] = {
    "When do your symptoms typically occur?": (
        "Morning", "Afternoon", "Evening", "Night", "All day", "No pattern",
    ),
    "Are your symptoms getting better, worse, or staying the same?": (
        "Getting better", "Getting worse", "Staying the same",
    ),
    "How did your symptoms start, suddenly or gradually?": (
        "Suddenly", "Gradually", "Not sure",
    ),
}

_YES_NO_OPENERS = (
    "are", "is", "do", "does", "did", "have", "has", "can", "could",
    "would", "will", "were", "was",
)


def infer_question_type(text: str) -> QuestionType:
    """Guess how a free-standing question text should be answered.

    Closed questions (auxiliary-verb opener, no "or" alternative) become
    yes/no; everything else is free text.
    """
    words = text.strip().lower().split()
    if not words:
        return QuestionType.TEXT
    if words[0] in _YES_NO_OPENERS and " or " not in f" {text.lower()} ":
        return QuestionType.YESNO
    return QuestionType.TEXT


def is_catch_all(rule: Rule) -> bool:
    return rule.predicate is always


def matching_rules(context: PatientContext, rules: Sequence[Rule] = DEFAULT_RULES) -> List[Rule]:
    """Rules whose predicate holds, or the catch-all rules when none does.

    Each predicate is evaluated exactly once.
    """
    matched = [rule for rule in rules if rule.predicate(context)]
    if not matched:
        matched = [rule for rule in rules if is_catch_all(rule)]
    return matched


def rank_questions(matched: Sequence[Rule], max_results: int = 12) -> List[str]:
    """Question texts of the matched rules, highest priority first, deduplicated."""
    # sorted() is stable, so per-rule order and rule order break ties
    ranked = sorted(
        ((text, rule.priority) for rule in matched for text in rule.questions),
        key=lambda item: -item[1],
    )

    selected: List[str] = []
    seen = set()
    for text, _priority in ranked:
        if text in seen:
            continue
        seen.add(text)
        selected.append(text)
    return selected[:max_results]


def select_questions(
    context: PatientContext,
    rules: Sequence[Rule] = DEFAULT_RULES,
    max_results: int = 12,
) -> List[str]:
    """Select the contextual questions for a patient.

    Args:
        context: Derived patient context
        rules: Rule table to evaluate
        max_results: Maximum number of questions returned

    Returns:
        Question texts ordered by rule priority (highest first)
    """
    return rank_questions(matching_rules(context, rules), max_results)


class RuleEngine:
    """Evaluates a rule table and renders the result as generated questions."""

    def __init__(
        self,
        rules: Sequence[Rule] = DEFAULT_RULES,
        config: Optional[QuestionConfig] = None,
    ):
        """Initialize engine with a rule table.

        Args:
            rules: Rule table; must include a catch-all rule
            config: Selection configuration

        Raises:
            ValueError: If the table is empty or has no catch-all rule
        """
        if not any(is_catch_all(rule) for rule in rules):
            raise ValueError("Rule table must include a catch-all rule")
        self.rules = tuple(rules)
        self.config = config or QuestionConfig()

        logger.info(
            "RULE_ENGINE_INITIALIZED",
            extra={
                "rule_count": len(self.rules),
                "rule_version": self.config.rule_version,
            }
        )

    def select(self, context: PatientContext) -> List[str]:
        matched = matching_rules(context, self.rules)
        questions = rank_questions(matched, self.config.max_results)
        logger.info(
            "QUESTION_SELECTION_COMPLETED",
            extra={
                "matched_rules": [rule.name for rule in matched],
                "question_count": len(questions),
                "max_severity": context.max_severity,
                "affected_systems": sorted(s.value for s in context.affected_systems),
                "rule_version": self.config.rule_version,
            }
        )
        return questions

    def contextual_questions(self, context: PatientContext) -> List[Question]:
        """Selected questions as session-scoped Question objects."""
        questions = []
        for index, text in enumerate(self.select(context), start=1):
            options = QUESTION_OPTIONS.get(text)
            questions.append(Question(
                id=f"contextual_{index}",
                text=text,
                type=QuestionType.SELECT if options else infer_question_type(text),
                options=options,
                source=QuestionSource.GENERATED,
            ))
        return questions
