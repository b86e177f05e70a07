from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APITestCase

from accounts.models import SchoolClass, UserProfile, UserRelationship
from courses.models import Course, CourseAssignment, CourseContent
from quizzes.models import Question, Quiz

User = get_user_model()


class QuizAPITestCase(APITestCase):
    """A teacher's course with one quiz, a class-assigned student and a verified parent."""

    def setUp(self):
        self.teacher = self.make_user('teacher', UserProfile.Role.TEACHER)
        self.other_teacher = self.make_user('other_teacher', UserProfile.Role.TEACHER)
        self.student = self.make_user('student', UserProfile.Role.STUDENT, first_name='Sam', last_name='Lee')
        self.other_student = self.make_user('other_student', UserProfile.Role.STUDENT)
        self.outsider = self.make_user('outsider', UserProfile.Role.STUDENT)
        self.parent = self.make_user('parent', UserProfile.Role.PARENT)
        self.unverified_parent = self.make_user('unverified_parent', UserProfile.Role.PARENT)

        self.course = Course.objects.create(title='Physics', teacher=self.teacher)
        self.content = CourseContent.objects.create(course=self.course, title='Motion', order=1)
        school_class = SchoolClass.objects.create(name='9A')
        school_class.students.add(self.student)
        CourseAssignment.objects.create(course=self.course, school_class=school_class)
        CourseAssignment.objects.create(course=self.course, student=self.other_student)
        UserRelationship.objects.create(parent=self.parent, student=self.student, is_verified=True)
        UserRelationship.objects.create(parent=self.unverified_parent, student=self.student, is_verified=False)

        self.quiz = Quiz.objects.create(content=self.content, title='Motion quiz', passing_score=70)
        self.choice = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.MULTIPLE_CHOICE,
            text='Which are vectors?',
            points=2,
            options=[
                {'id': 'velocity', 'text': 'Velocity'},
                {'id': 'speed', 'text': 'Speed'},
                {'id': 'force', 'text': 'Force'},
            ],
            correct_answer={'type': 'multiple', 'value': ['velocity', 'force']},
            explanation='Vectors have a direction.',
        )
        self.true_false = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.TRUE_FALSE,
            text='Mass changes with location.',
            points=1,
            correct_answer={'type': 'single', 'value': 'false'},
            explanation='Weight changes, mass does not.',
        )
        self.essay = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.ESSAY,
            text='Explain inertia.',
            points=2,
        )

    def make_user(self, username, role, **extra):
        user = User.objects.create_user(username=username, password='password', email=f'{username}@example.com', **extra)
        UserProfile.objects.create(user=user, role=role)
        return user

    def start_attempt(self, user=None):
        self.client.force_authenticate(user=user or self.student)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        return response.data['submission_id']

    def submit(self, submission_id, answers, user=None, **extra):
        self.client.force_authenticate(user=user or self.student)
        payload = {'submission_id': submission_id, 'answers': answers, **extra}
        return self.client.post(self.url('quiz-submit', self.quiz.id), payload, format='json')

    def full_marks_answers(self):
        return [
            {'question_id': self.choice.id, 'student_answer': ['force', 'velocity']},
            {'question_id': self.true_false.id, 'student_answer': False},
            {'question_id': self.essay.id, 'student_answer': 'Objects resist changes in motion.'},
        ]

    def url(self, name, *args):
        return reverse(name, args=args)
