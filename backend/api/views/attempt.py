from rest_framework.response import Response
from rest_framework.views import APIView

from quizzes.models import QuizAttempt
from quizzes.policy import AccessPolicy


class AttemptResults(APIView):
    def get(self, request, attempt_id):
        policy = AccessPolicy.for_user(request.user)
        attempt = (
            QuizAttempt.objects.select_related('quiz__content__course', 'student')
            .filter(id=attempt_id)
            .first()
        )
        # A missing attempt and someone else's attempt get the same answer.
        policy.require(attempt is not None and policy.can_view_attempt(attempt))
        return Response(policy.review_attempt(attempt))
