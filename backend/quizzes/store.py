from django.db import IntegrityError, transaction
from django.db.models import Max

from .models import QuestionResponse, QuizAttempt


class AttemptStore:
    """Durable record of quiz attempts and their responses, backed by the ORM."""

    def find_in_progress(self, quiz, student):
        return QuizAttempt.objects.filter(
            quiz=quiz,
            student=student,
            status=QuizAttempt.Status.IN_PROGRESS,
        ).first()

    def next_attempt_number(self, quiz, student) -> int:
        last = QuizAttempt.objects.filter(quiz=quiz, student=student).aggregate(Max('attempt_number'))
        return (last['attempt_number__max'] or 0) + 1

    def insert_attempt(self, quiz, student, attempt_number, started_at):
        """Insert an IN_PROGRESS attempt, or return None when the uniqueness constraints reject it."""
        try:
            with transaction.atomic():
                return QuizAttempt.objects.create(
                    quiz=quiz,
                    student=student,
                    attempt_number=attempt_number,
                    started_at=started_at,
                    status=QuizAttempt.Status.IN_PROGRESS,
                )
        except IntegrityError:
            return None

    def lock_attempt(self, attempt_id):
        """Fetch an attempt row for update; call inside ``transaction.atomic``."""
        return (
            QuizAttempt.objects.select_for_update()
            .select_related('quiz')
            .filter(id=attempt_id)
            .first()
        )

    def questions_for(self, quiz) -> list:
        return list(quiz.questions.order_by('order'))

    def create_responses(self, responses) -> list:
        return QuestionResponse.objects.bulk_create(responses)

    def save_attempt(self, attempt, fields):
        attempt.save(update_fields=fields)
        return attempt

    def get_response(self, attempt, question_id):
        return (
            QuestionResponse.objects.select_related('question')
            .filter(attempt=attempt, question_id=question_id)
            .first()
        )

    def save_response(self, response, fields):
        response.save(update_fields=fields)
        return response

    def responses_for(self, attempt) -> list:
        return list(attempt.responses.select_related('question').all())
