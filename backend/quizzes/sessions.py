"""Quiz attempt lifecycle: start or resume, submit and grade, manual review.

``QuizSessionManager`` owns the attempt state machine::

    IN_PROGRESS --submit--> SUBMITTED --last pending response graded--> GRADED

It talks to storage only through the ``AttemptStore`` handed to its
constructor, and reads the current time through an injectable clock so the
deadline rules can be exercised deterministically.
"""
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from .answers import is_valid_student_answer
from .exceptions import (
    AttemptAlreadySubmitted,
    AttemptNotSubmitted,
    AttemptStateError,
    Forbidden,
    InvalidRequest,
    SubmissionDeadlinePassed,
)
from .grading import Evaluation, calculate_score, evaluate
from .models import QuestionResponse, QuizAttempt
from .store import AttemptStore

logger = logging.getLogger(__name__)

UNANSWERED = Evaluation(is_correct=False, points_earned=0)


@dataclass
class SubmissionResult:
    attempt: QuizAttempt
    passed: bool
    score: float
    earned_points: float
    total_points: float


class QuizSessionManager:
    create_retries = 3

    def __init__(self, store=None, clock=None, grace_seconds=None):
        self.store = store or AttemptStore()
        self.clock = clock or timezone.now
        if grace_seconds is None:
            grace_seconds = getattr(settings, 'SCHOOLBRIDGE_SUBMISSION_GRACE_SECONDS', 30)
        self.grace_seconds = grace_seconds

    def get_or_create_attempt(self, quiz, student):
        """Return ``(attempt, created)``; an IN_PROGRESS attempt is resumed, never duplicated."""
        existing = self.store.find_in_progress(quiz, student)
        if existing is not None:
            logger.debug('Resuming attempt %s for student %s on quiz %s', existing.id, student.id, quiz.id)
            return existing, False
        for _ in range(self.create_retries):
            attempt_number = self.store.next_attempt_number(quiz, student)
            attempt = self.store.insert_attempt(quiz, student, attempt_number, self.clock())
            if attempt is not None:
                logger.info(
                    'Started attempt %s (#%s) for student %s on quiz %s',
                    attempt.id, attempt_number, student.id, quiz.id,
                )
                return attempt, True
            # Lost the race against a concurrent request; its attempt is the one to resume.
            existing = self.store.find_in_progress(quiz, student)
            if existing is not None:
                return existing, False
        raise AttemptStateError('Could not start a new attempt. Please try again.')

    def submit_attempt(self, quiz, attempt_id, student, answers, time_spent=None) -> SubmissionResult:
        with transaction.atomic():
            attempt = self.store.lock_attempt(attempt_id)
            if attempt is None or attempt.student_id != student.id or attempt.quiz_id != quiz.id:
                raise Forbidden()
            if attempt.status != QuizAttempt.Status.IN_PROGRESS:
                logger.warning('Rejected resubmission of attempt %s by student %s', attempt.id, student.id)
                raise AttemptAlreadySubmitted()
            now = self.clock()
            elapsed = max((now - attempt.started_at).total_seconds(), 0)
            if quiz.time_limit and elapsed > quiz.time_limit * 60 + self.grace_seconds:
                logger.warning(
                    'Rejected late submission of attempt %s: %.0fs elapsed, limit %s min',
                    attempt.id, elapsed, quiz.time_limit,
                )
                raise SubmissionDeadlinePassed()

            questions = self.store.questions_for(quiz)
            answer_map = self._index_answers(answers, questions)
            responses = []
            total_points = 0
            earned_points = 0
            for question in questions:
                student_answer = answer_map.get(question.id)
                if student_answer is None:
                    evaluation = UNANSWERED
                else:
                    evaluation = evaluate(question, student_answer)
                total_points += question.points
                earned_points += evaluation.points_earned
                responses.append(
                    QuestionResponse(
                        attempt=attempt,
                        question=question,
                        student_answer=student_answer,
                        is_correct=evaluation.is_correct,
                        points_earned=evaluation.points_earned,
                        points_possible=question.points,
                    )
                )
            self.store.create_responses(responses)

            score = calculate_score(earned_points, total_points)
            attempt.submitted_at = now
            attempt.score = score
            attempt.earned_points = earned_points
            attempt.total_points = total_points
            attempt.time_spent = self._clamp_time_spent(time_spent, elapsed)
            attempt.status = QuizAttempt.Status.SUBMITTED
            self.store.save_attempt(
                attempt,
                ['submitted_at', 'score', 'earned_points', 'total_points', 'time_spent', 'status'],
            )

        passed = quiz.is_passing(score)
        logger.info(
            'Attempt %s submitted: %s/%s points (%.1f%%), passed=%s',
            attempt.id, earned_points, total_points, score, passed,
        )
        return SubmissionResult(
            attempt=attempt,
            passed=passed,
            score=score,
            earned_points=earned_points,
            total_points=total_points,
        )

    def grade_response(self, attempt, question_id, grader, points_earned, is_correct=None, feedback=''):
        """Record a teacher's grade for one response and roll the attempt score forward."""
        with transaction.atomic():
            attempt = self.store.lock_attempt(attempt.id)
            if not attempt.is_finished:
                raise AttemptNotSubmitted()
            response = self.store.get_response(attempt, question_id)
            if response is None:
                raise NotFound('Response not found.')
            # Graded against the points the question carried when the attempt was submitted.
            maximum = response.points_possible
            if points_earned < 0 or points_earned > maximum:
                raise InvalidRequest({'points_earned': [f'Points must be between 0 and {maximum:g}.']})
            if is_correct is None:
                is_correct = points_earned == maximum
            now = self.clock()
            response.points_earned = points_earned
            response.is_correct = is_correct
            response.feedback = feedback or ''
            response.graded_by = grader
            response.graded_at = now
            self.store.save_response(
                response, ['points_earned', 'is_correct', 'feedback', 'graded_by', 'graded_at']
            )

            responses = self.store.responses_for(attempt)
            attempt.earned_points = sum(item.points_earned for item in responses)
            if attempt.total_points is None:
                attempt.total_points = sum(item.points_possible for item in responses)
            attempt.score = calculate_score(attempt.earned_points, attempt.total_points)
            update_fields = ['earned_points', 'total_points', 'score']
            if all(item.is_correct is not None for item in responses):
                attempt.status = QuizAttempt.Status.GRADED
                attempt.graded_at = now
                update_fields += ['status', 'graded_at']
            self.store.save_attempt(attempt, update_fields)

        logger.info(
            'Response to question %s on attempt %s graded by %s: %s points',
            question_id, attempt.id, grader.id, points_earned,
        )
        return response

    def _index_answers(self, answers, questions) -> dict:
        question_ids = {question.id for question in questions}
        answer_map = {}
        for entry in answers:
            question_id = entry.get('question_id')
            if question_id not in question_ids:
                raise InvalidRequest({'answers': [f'Unknown question id: {question_id}.']})
            if question_id in answer_map:
                raise InvalidRequest({'answers': [f'Question {question_id} was answered more than once.']})
            student_answer = entry.get('student_answer')
            if not is_valid_student_answer(student_answer):
                raise InvalidRequest({'answers': [f'Unsupported answer for question {question_id}.']})
            answer_map[question_id] = student_answer
        return answer_map

    def _clamp_time_spent(self, time_spent, elapsed) -> int:
        if time_spent is None:
            return int(elapsed)
        return int(min(max(time_spent, 0), elapsed))
