from django.shortcuts import get_object_or_404
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsTeacher
from quizzes.models import Quiz
from quizzes.policy import AccessPolicy
from quizzes.stats import aggregate_quiz_stats, summarize_attempt


def managed_quiz(request, quiz_id):
    quiz = get_object_or_404(Quiz.objects.select_related('content__course'), id=quiz_id)
    policy = AccessPolicy.for_user(request.user)
    policy.require(policy.can_manage_quiz(quiz))
    return quiz


def quiz_attempts(quiz):
    return list(
        quiz.attempts
        .select_related('quiz', 'student')
        .prefetch_related('responses')
        .order_by('-started_at')
    )


class QuizSubmissionList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, quiz_id):
        quiz = managed_quiz(request, quiz_id)
        attempts = quiz_attempts(quiz)
        return Response(
            {
                'quiz': {
                    'id': quiz.id,
                    'title': quiz.title,
                    'course_title': quiz.content.course.title,
                    'passing_score': quiz.passing_score,
                },
                'submissions': [summarize_attempt(attempt) for attempt in attempts],
                'stats': aggregate_quiz_stats(quiz, attempts),
            }
        )
