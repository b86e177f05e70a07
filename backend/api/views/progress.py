from django.contrib.auth import get_user_model
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import ensure_profile
from accounts.permissions import IsParent, IsStudent
from accounts.serializers import UserSummarySerializer
from quizzes.policy import AccessPolicy
from quizzes.stats import aggregate_student_stats

User = get_user_model()


def progress_payload(student):
    payload = aggregate_student_stats(student)
    payload['student'] = UserSummarySerializer(ensure_profile(student)).data
    return payload


class StudentQuizProgress(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        return Response(progress_payload(request.user))


class ParentChildQuizProgress(APIView):
    permission_classes = [IsParent]

    def get(self, request, student_id):
        policy = AccessPolicy.for_user(request.user)
        student = User.objects.filter(id=student_id).first()
        policy.require(student is not None and policy.is_verified_parent_of(student))
        return Response(progress_payload(student))
