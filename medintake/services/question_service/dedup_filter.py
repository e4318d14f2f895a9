"""Duplicate filter for externally generated questions.

Generated questions are checked against the default question bank before
display. Two checks, either of which marks a candidate as a duplicate:

1. Exact match after normalization against any bank question
2. Substring containment (either direction) against KEY_PHRASES

Check 2 is intentionally broad and will drop some legitimate questions
that share a keyword with a default question. Filtering never reorders.
"""
import logging
import re
from typing import Iterable, List, Sequence, TypeVar, Union

from medintake.shared.models import Question
from .config import KEY_PHRASES
from .question_bank import HARDCODED_QUESTIONS

logger = logging.getLogger(__name__)

Candidate = TypeVar("Candidate", Question, str)

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_question(text: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace.

    Example:
        >>> normalize_question("  Any   Allergies? ")
        'any allergies'
    """
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


_NORMALIZED_PHRASES = tuple(normalize_question(p) for p in KEY_PHRASES)


def _text_of(candidate: Union[Question, str]) -> str:
    return candidate.text if isinstance(candidate, Question) else candidate


def _matches_key_phrase(normalized: str) -> bool:
    return any(
        phrase in normalized or normalized in phrase
        for phrase in _NORMALIZED_PHRASES
    )


def is_duplicate(text: str, bank: Sequence[str] = HARDCODED_QUESTIONS) -> bool:
    """Check whether a question text repeats something already asked.

    Args:
        text: Candidate question text
        bank: Texts of questions every patient already answers

    Returns:
        True if the candidate should be dropped
    """
    normalized = normalize_question(text)
    if normalized in {normalize_question(q) for q in bank}:
        return True
    return _matches_key_phrase(normalized)


def filter_duplicates(
    candidates: Iterable[Candidate],
    bank: Sequence[str] = HARDCODED_QUESTIONS,
) -> List[Candidate]:
    """Remove candidates that duplicate the bank or an earlier candidate.

    Accepts question texts or Question objects and returns the same kind.

    Args:
        candidates: Generated questions in display order
        bank: Texts of questions every patient already answers

    Returns:
        Surviving candidates in their original order
    """
    normalized_bank = {normalize_question(q) for q in bank}
    kept: List[Candidate] = []
    seen = set()
    dropped = 0

    for candidate in candidates:
        normalized = normalize_question(_text_of(candidate))
        if (
            normalized in normalized_bank
            or normalized in seen
            or _matches_key_phrase(normalized)
        ):
            dropped += 1
            continue
        seen.add(normalized)
        kept.append(candidate)

    if dropped:
        logger.debug(
            "DUPLICATE_QUESTIONS_DROPPED",
            extra={"dropped": dropped, "kept": len(kept)}
        )
    return kept
