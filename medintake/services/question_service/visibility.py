"""Follow-up visibility resolver.

A question named in another question's follow_up mapping is conditional:
it is shown only while one of its parents is answered with one of that
parent's trigger answers. Every other question is always shown.
Visibility is recomputed from scratch on each call.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

from medintake.shared.models import Question, QuestionType


@dataclass(frozen=True)
class FollowUpTrigger:
    """Parent question and the answers that reveal a follow-up."""
    parent_id: str
    answers: FrozenSet[str]
    parent_type: QuestionType = QuestionType.TEXT


def build_follow_up_index(questions: Iterable[Question]) -> Dict[str, Tuple[FollowUpTrigger, ...]]:
    """Reverse the follow_up edges into child id -> triggers.

    A child gets one trigger per parent, in question order. When a parent
    reaches the child through several answers, that trigger's answer set
    is the union of them.
    """
    by_parent: Dict[str, Dict[str, FollowUpTrigger]] = {}
    for question in questions:
        for answer, child_ids in (question.follow_up or {}).items():
            for child_id in child_ids:
                triggers = by_parent.setdefault(child_id, {})
                existing = triggers.get(question.id)
                answers = {answer}
                if existing is not None:
                    answers |= existing.answers
                triggers[question.id] = FollowUpTrigger(
                    parent_id=question.id,
                    answers=frozenset(answers),
                    parent_type=question.type,
                )
    return {child_id: tuple(triggers.values()) for child_id, triggers in by_parent.items()}


def _answer_tokens(answer: str, parent_type: QuestionType) -> List[str]:
    if parent_type == QuestionType.MULTISELECT:
        return [token.strip() for token in answer.split(",") if token.strip()]
    return [answer]


def _is_triggered(trigger: FollowUpTrigger, answers: Mapping[str, str]) -> bool:
    answer = answers.get(trigger.parent_id)
    if answer is None:
        return False
    return any(
        token in trigger.answers
        for token in _answer_tokens(answer, trigger.parent_type)
    )


def is_visible(
    question_id: str,
    answers: Mapping[str, str],
    index: Mapping[str, Tuple[FollowUpTrigger, ...]],
) -> bool:
    triggers = index.get(question_id)
    if not triggers:
        return True
    return any(_is_triggered(trigger, answers) for trigger in triggers)


def compute_visibility(
    questions: Iterable[Question],
    answers: Mapping[str, str],
) -> FrozenSet[str]:
    """Ids of the questions that should currently be shown.

    Multiselect answers are stored comma-joined; the follow-up is shown
    when any selected option is a trigger. Other parents must match a
    trigger exactly.

    Args:
        questions: Questions rendered on the current page
        answers: Recorded answers by question id

    Returns:
        Set of visible question ids
    """
    questions = list(questions)
    index = build_follow_up_index(questions)
    return frozenset(q.id for q in questions if is_visible(q.id, answers, index))
