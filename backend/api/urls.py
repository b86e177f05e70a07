from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AttemptResults,
    ParentChildQuizProgress,
    QuizDetail,
    QuizGradeExportView,
    QuizQuestionDetail,
    QuizQuestionListCreate,
    QuizSubmissionList,
    QuizSubmit,
    ResponseGradeView,
    StudentQuizProgress,
    TeacherQuizViewSet,
)

router = DefaultRouter()
router.register('teacher/quizzes', TeacherQuizViewSet, basename='teacher-quiz')

urlpatterns = [
    path('quizzes/<int:quiz_id>/', QuizDetail.as_view(), name='quiz-detail'),
    path('quizzes/<int:quiz_id>/submit/', QuizSubmit.as_view(), name='quiz-submit'),
    path('attempts/<int:attempt_id>/results/', AttemptResults.as_view(), name='attempt-results'),
    path(
        'teacher/quizzes/<int:quiz_id>/submissions/',
        QuizSubmissionList.as_view(),
        name='quiz-submissions',
    ),
    path(
        'teacher/quizzes/<int:quiz_id>/submissions/export/',
        QuizGradeExportView.as_view(),
        name='quiz-submissions-export',
    ),
    path(
        'teacher/quizzes/<int:quiz_id>/submissions/<int:attempt_id>/responses/<int:question_id>/grade/',
        ResponseGradeView.as_view(),
        name='response-grade',
    ),
    path('teacher/quizzes/<int:quiz_id>/questions/', QuizQuestionListCreate.as_view(), name='quiz-questions'),
    path(
        'teacher/quizzes/<int:quiz_id>/questions/<int:question_id>/',
        QuizQuestionDetail.as_view(),
        name='quiz-question-detail',
    ),
    path('student/quiz-progress/', StudentQuizProgress.as_view(), name='student-quiz-progress'),
    path(
        'parent/children/<int:student_id>/quiz-progress/',
        ParentChildQuizProgress.as_view(),
        name='parent-child-quiz-progress',
    ),
    path('', include(router.urls)),
]
