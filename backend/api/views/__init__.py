from .quiz import (
    QuizDetail,
    QuizSubmit,
    TeacherQuizViewSet,
    QuizQuestionListCreate,
    QuizQuestionDetail,
)
from .attempt import AttemptResults
from .submissions import QuizSubmissionList
from .grading import ResponseGradeView, QuizGradeExportView
from .progress import StudentQuizProgress, ParentChildQuizProgress
