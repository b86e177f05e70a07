"""Who may see which quiz data, and in what shape.

Views build one ``AccessPolicy`` per request and ask it for explicit
decisions (``can_take_quiz``, ``can_manage_quiz`` ...) instead of comparing
role strings inline. ``require`` turns a negative decision into ``Forbidden``.
"""
from django.db import models

from accounts.models import UserProfile, UserRelationship, get_role
from courses.models import CourseAssignment
from .exceptions import Forbidden
from .models import Quiz, QuizAttempt

Role = UserProfile.Role


def question_payload(question, include_explanation=False) -> dict:
    # correct_answer is only ever exposed through review_attempt.
    payload = {
        'id': question.id,
        'question_type': question.question_type,
        'text': question.text,
        'order': question.order,
        'points': question.points,
        'options': question.options,
    }
    if include_explanation:
        payload['explanation'] = question.explanation
    return payload


def filter_quiz_for_role(quiz, role, attempt_status=None) -> dict:
    """Student-facing view of a quiz: never carries correct answers, explanations only in practice mode.

    ``role`` and ``attempt_status`` do not change what is shown. They are echoed back as
    ``viewer_role`` and ``attempt_status`` so the client can pick its layout.
    """
    show_explanations = quiz.mode == Quiz.Mode.PRACTICE
    return {
        'id': quiz.id,
        'title': quiz.title,
        'description': quiz.description,
        'passing_score': quiz.passing_score,
        'time_limit': quiz.time_limit,
        'mode': quiz.mode,
        'show_answers_after': quiz.show_answers_after,
        'viewer_role': role,
        'attempt_status': attempt_status,
        'questions': [
            question_payload(question, include_explanation=show_explanations)
            for question in quiz.questions.order_by('order')
        ],
    }


class AccessPolicy:
    def __init__(self, user, role):
        self.user = user
        self.role = role

    @classmethod
    def for_user(cls, user):
        return cls(user, get_role(user))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_parent(self) -> bool:
        return self.role == Role.PARENT

    def require(self, allowed: bool) -> None:
        if not allowed:
            raise Forbidden()

    def assigned_course_ids(self, student):
        return CourseAssignment.objects.filter(
            models.Q(student=student) | models.Q(school_class__students=student)
        ).values_list('course_id', flat=True)

    def can_take_quiz(self, quiz) -> bool:
        if not self.is_student:
            return False
        return CourseAssignment.objects.filter(course_id=quiz.content.course_id).filter(
            models.Q(student=self.user) | models.Q(school_class__students=self.user)
        ).exists()

    def can_manage_course(self, course) -> bool:
        if self.is_admin:
            return True
        return self.is_teacher and course.teacher_id == self.user.id

    def can_manage_quiz(self, quiz) -> bool:
        return self.can_manage_course(quiz.content.course)

    def can_view_quiz(self, quiz) -> bool:
        return self.can_take_quiz(quiz) or self.can_manage_quiz(quiz)

    def is_verified_parent_of(self, student) -> bool:
        if not self.is_parent:
            return False
        return UserRelationship.objects.filter(
            parent=self.user, student=student, is_verified=True
        ).exists()

    def can_view_student(self, student) -> bool:
        if self.is_admin or student.id == self.user.id:
            return True
        if self.is_teacher:
            return self.user.taught_courses.filter(id__in=self.assigned_course_ids(student)).exists()
        return self.is_verified_parent_of(student)

    def can_view_attempt(self, attempt) -> bool:
        if attempt.student_id == self.user.id:
            return True
        if self.can_manage_quiz(attempt.quiz):
            return True
        return self.is_verified_parent_of(attempt.student)

    def manageable_quizzes(self):
        queryset = Quiz.objects.select_related('content__course')
        if self.is_admin:
            return queryset.all()
        if self.is_teacher:
            return queryset.filter(content__course__teacher=self.user)
        return queryset.none()

    def filter_quiz(self, quiz, attempt_status=None) -> dict:
        return filter_quiz_for_role(quiz, self.role, attempt_status)

    def can_see_answers(self, attempt) -> bool:
        if self.can_manage_quiz(attempt.quiz):
            return True
        return attempt.status != QuizAttempt.Status.IN_PROGRESS and attempt.quiz.show_answers_after

    def review_attempt(self, attempt) -> dict:
        """Graded breakdown of one attempt; answers are revealed only once allowed."""
        quiz = attempt.quiz
        reveal = self.can_see_answers(attempt)
        show_explanations = reveal and (quiz.mode == Quiz.Mode.PRACTICE or self.can_manage_quiz(quiz))
        responses = []
        for response in attempt.responses.select_related('question').all():
            question = response.question
            entry = question_payload(question, include_explanation=show_explanations)
            entry.update(
                {
                    'student_answer': response.student_answer,
                    'is_correct': response.is_correct,
                    'points_earned': response.points_earned,
                    'feedback': response.feedback,
                    'pending_review': response.pending_review,
                }
            )
            if reveal:
                entry['correct_answer'] = question.correct_answer
            responses.append(entry)
        return {
            'id': attempt.id,
            'quiz_id': quiz.id,
            'quiz_title': quiz.title,
            'student_id': attempt.student_id,
            'attempt_number': attempt.attempt_number,
            'status': attempt.status,
            'started_at': attempt.started_at,
            'submitted_at': attempt.submitted_at,
            'graded_at': attempt.graded_at,
            'time_spent': attempt.time_spent,
            'score': attempt.score,
            'earned_points': attempt.earned_points,
            'total_points': attempt.total_points,
            'passing_score': quiz.passing_score,
            'passed': attempt.passed,
            'answers_revealed': reveal,
            'responses': responses,
        }
