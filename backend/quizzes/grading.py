"""Answer evaluation for quiz questions.

Objective questions (multiple choice, true / false) are graded against their
stored answer key with no partial credit. Subjective questions (short answer,
essay) are never auto-graded: they come back with ``is_correct=None`` and zero
points until a teacher grades them by hand.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .answers import InvalidAnswerKey, MultipleAnswer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Evaluation:
    is_correct: Optional[bool]
    points_earned: float

    @property
    def pending_review(self) -> bool:
        return self.is_correct is None


PENDING_REVIEW = Evaluation(is_correct=None, points_earned=0)


def _normalize_choice(value, question):
    # True / false answers arrive either as JSON booleans or as the option ids "true" / "false".
    if question.question_type == question.QuestionType.TRUE_FALSE and isinstance(value, bool):
        return 'true' if value else 'false'
    return value


def _as_set(value) -> set:
    if isinstance(value, (list, tuple)):
        return set(value)
    return {value}


def is_answer_correct(question, key, student_answer) -> bool:
    if student_answer is None:
        return False
    if isinstance(key, MultipleAnswer):
        return _as_set(student_answer) == set(key.values)
    if isinstance(student_answer, (list, tuple)):
        return False
    expected = _normalize_choice(key.value, question)
    given = _normalize_choice(student_answer, question)
    return type(given) is type(expected) and given == expected


def evaluate(question, student_answer) -> Evaluation:
    if not question.is_auto_gradable:
        return PENDING_REVIEW
    try:
        key = question.answer_key()
    except InvalidAnswerKey:
        logger.warning('Question %s has a malformed answer key; routing to manual review', question.pk)
        return PENDING_REVIEW
    if key is None:
        logger.warning('Question %s has no answer key; routing to manual review', question.pk)
        return PENDING_REVIEW
    if is_answer_correct(question, key, student_answer):
        return Evaluation(is_correct=True, points_earned=question.points)
    return Evaluation(is_correct=False, points_earned=0)


def calculate_score(earned_points, total_points) -> float:
    """Percentage of ``total_points`` earned, clamped to 0..100; 0 when the quiz carries no points."""
    if not total_points:
        return 0.0
    return min(max(earned_points / total_points * 100, 0.0), 100.0)
