from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsStudent, IsTeacher
from quizzes.models import Quiz
from quizzes.policy import AccessPolicy
from quizzes.serializers import QuestionSerializer, QuizSerializer, SubmitAttemptSerializer
from quizzes.sessions import QuizSessionManager


class QuizDetail(APIView):
    """Fetch a quiz to take it; students are handed their current attempt alongside the questions."""

    def get(self, request, quiz_id):
        quiz = get_object_or_404(Quiz.objects.select_related('content__course'), id=quiz_id)
        policy = AccessPolicy.for_user(request.user)
        policy.require(policy.can_view_quiz(quiz))

        submission_id = None
        attempt_status = None
        if policy.can_take_quiz(quiz):
            attempt, _ = QuizSessionManager().get_or_create_attempt(quiz, request.user)
            submission_id = attempt.id
            attempt_status = attempt.status
        return Response({'quiz': policy.filter_quiz(quiz, attempt_status), 'submission_id': submission_id})


class QuizSubmit(APIView):
    permission_classes = [IsStudent]

    def post(self, request, quiz_id):
        quiz = get_object_or_404(Quiz, id=quiz_id)
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = QuizSessionManager().submit_attempt(
            quiz,
            data['submission_id'],
            request.user,
            data['answers'],
            time_spent=data.get('time_spent'),
        )
        attempt = result.attempt
        return Response(
            {
                'submission_id': attempt.id,
                'attempt_number': attempt.attempt_number,
                'status': attempt.status,
                'submitted_at': attempt.submitted_at,
                'time_spent': attempt.time_spent,
                'score': result.score,
                'earned_points': result.earned_points,
                'total_points': result.total_points,
                'passing_score': quiz.passing_score,
                'passed': result.passed,
            }
        )


class TeacherQuizViewSet(viewsets.ModelViewSet):
    serializer_class = QuizSerializer
    permission_classes = [IsTeacher]

    def get_queryset(self):
        return AccessPolicy.for_user(self.request.user).manageable_quizzes().prefetch_related('questions')


class QuizQuestionListCreate(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, quiz_id):
        quiz = get_object_or_404(AccessPolicy.for_user(request.user).manageable_quizzes(), id=quiz_id)
        serializer = QuestionSerializer(quiz.questions.order_by('order'), many=True)
        return Response(serializer.data)

    def post(self, request, quiz_id):
        quiz = get_object_or_404(AccessPolicy.for_user(request.user).manageable_quizzes(), id=quiz_id)
        serializer = QuestionSerializer(data=request.data, context={'request': request, 'quiz': quiz})
        serializer.is_valid(raise_exception=True)
        serializer.save(quiz=quiz)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class QuizQuestionDetail(APIView):
    permission_classes = [IsTeacher]

    def _get_question(self, request, quiz_id, question_id):
        quiz = get_object_or_404(AccessPolicy.for_user(request.user).manageable_quizzes(), id=quiz_id)
        return get_object_or_404(quiz.questions.all(), id=question_id)

    def get(self, request, quiz_id, question_id):
        question = self._get_question(request, quiz_id, question_id)
        return Response(QuestionSerializer(question).data)

    def put(self, request, quiz_id, question_id):
        return self._update(request, quiz_id, question_id, partial=False)

    def patch(self, request, quiz_id, question_id):
        return self._update(request, quiz_id, question_id, partial=True)

    def delete(self, request, quiz_id, question_id):
        question = self._get_question(request, quiz_id, question_id)
        if question.responses.exists():
            return Response(
                {'detail': 'Questions that students have answered cannot be deleted.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        question.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _update(self, request, quiz_id, question_id, partial):
        question = self._get_question(request, quiz_id, question_id)
        serializer = QuestionSerializer(
            question,
            data=request.data,
            partial=partial,
            context={'request': request, 'quiz': question.quiz},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
