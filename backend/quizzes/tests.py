from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from accounts.models import UserProfile
from courses.models import Course, CourseContent
from .answers import InvalidAnswerKey, MultipleAnswer, SingleAnswer, is_valid_student_answer, parse_answer_key
from .exceptions import AttemptAlreadySubmitted, AttemptNotSubmitted, Forbidden, InvalidRequest, SubmissionDeadlinePassed
from .grading import calculate_score, evaluate
from .models import Question, QuestionResponse, Quiz, QuizAttempt
from .policy import filter_quiz_for_role
from .sessions import QuizSessionManager
from .stats import aggregate_quiz_stats, aggregate_student_stats, score_distribution
from .store import AttemptStore

User = get_user_model()


def make_user(username, role=UserProfile.Role.STUDENT):
    user = User.objects.create_user(username=username, password='password')
    UserProfile.objects.create(user=user, role=role)
    return user


def make_quiz(teacher, **kwargs):
    course = Course.objects.create(title='Biology', teacher=teacher)
    content = CourseContent.objects.create(course=course, title='Cells', order=1)
    return Quiz.objects.create(content=content, title=kwargs.pop('title', 'Cells quiz'), **kwargs)


def choice_question(quiz, correct_answer, points=1, options=('a', 'b', 'c')):
    return Question.objects.create(
        quiz=quiz,
        question_type=Question.QuestionType.MULTIPLE_CHOICE,
        text='Pick the right ones',
        points=points,
        options=[{'id': option, 'text': option.upper()} for option in options],
        correct_answer=correct_answer,
    )


class FixedClock:
    def __init__(self, now=None):
        self.now = now or timezone.now()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class AnswerKeyTests(TestCase):
    def test_parse_single_and_multiple(self):
        self.assertEqual(parse_answer_key({'type': 'single', 'value': 'a'}), SingleAnswer('a'))
        self.assertEqual(
            parse_answer_key({'type': 'multiple', 'value': ['a', 'b']}),
            MultipleAnswer(('a', 'b')),
        )

    def test_parse_rejects_malformed_keys(self):
        for raw in ['a', {'type': 'single'}, {'type': 'multiple', 'value': []}, {'type': 'other', 'value': 'a'},
                    {'type': 'single', 'value': 1}]:
            with self.assertRaises(InvalidAnswerKey):
                parse_answer_key(raw)

    def test_student_answer_shapes(self):
        self.assertTrue(is_valid_student_answer(None))
        self.assertTrue(is_valid_student_answer(True))
        self.assertTrue(is_valid_student_answer(['a', 'b']))
        self.assertFalse(is_valid_student_answer(3))
        self.assertFalse(is_valid_student_answer({'a': 1}))
        self.assertFalse(is_valid_student_answer(['a', 2]))


class QuestionModelTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', UserProfile.Role.TEACHER)
        self.quiz = make_quiz(self.teacher)

    def test_order_is_assigned_automatically(self):
        first = choice_question(self.quiz, {'type': 'single', 'value': 'a'})
        second = choice_question(self.quiz, {'type': 'single', 'value': 'b'})
        self.assertEqual(first.order, 1)
        self.assertEqual(second.order, 2)

    def test_points_must_be_positive(self):
        with self.assertRaises(ValidationError):
            choice_question(self.quiz, {'type': 'single', 'value': 'a'}, points=0)

    def test_choice_question_needs_known_answer(self):
        with self.assertRaises(ValidationError):
            choice_question(self.quiz, {'type': 'single', 'value': 'z'})
        with self.assertRaises(ValidationError):
            choice_question(self.quiz, {'type': 'multiple', 'value': ['a', 'z']})
        with self.assertRaises(ValidationError):
            choice_question(self.quiz, {'kind': 'single'})

    def test_true_false_gets_default_options(self):
        question = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.TRUE_FALSE,
            text='Cells have walls',
            correct_answer={'type': 'single', 'value': False},
        )
        self.assertEqual(question.option_ids(), ['true', 'false'])

    def test_true_false_key_must_name_an_option(self):
        with self.assertRaises(ValidationError):
            Question.objects.create(
                quiz=self.quiz,
                question_type=Question.QuestionType.TRUE_FALSE,
                text='Cells have walls',
                correct_answer={'type': 'single', 'value': 'True'},
            )
        with self.assertRaises(ValidationError):
            Question.objects.create(
                quiz=self.quiz,
                question_type=Question.QuestionType.TRUE_FALSE,
                text='Cells have walls',
                options=[{'id': 'T', 'text': 'Yes'}, {'id': 'F', 'text': 'No'}],
                correct_answer={'type': 'single', 'value': 'true'},
            )
        question = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.TRUE_FALSE,
            text='Cells have walls',
            options=[{'id': 'T', 'text': 'Yes'}, {'id': 'F', 'text': 'No'}],
            correct_answer={'type': 'single', 'value': 'T'},
        )
        self.assertEqual(question.option_ids(), ['T', 'F'])

    def test_total_points(self):
        choice_question(self.quiz, {'type': 'single', 'value': 'a'}, points=2)
        choice_question(self.quiz, {'type': 'single', 'value': 'b'}, points=3)
        self.assertEqual(self.quiz.total_points, 5)


class EvaluateTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', UserProfile.Role.TEACHER)
        self.quiz = make_quiz(self.teacher)

    def test_multiple_answer_has_no_partial_credit(self):
        question = choice_question(self.quiz, {'type': 'multiple', 'value': ['a', 'b']}, points=4)
        partial = evaluate(question, ['a'])
        self.assertFalse(partial.is_correct)
        self.assertEqual(partial.points_earned, 0)
        reordered = evaluate(question, ['b', 'a'])
        self.assertTrue(reordered.is_correct)
        self.assertEqual(reordered.points_earned, 4)
        self.assertFalse(evaluate(question, ['a', 'b', 'c']).is_correct)

    def test_single_answer_is_exact(self):
        question = choice_question(self.quiz, {'type': 'single', 'value': 'a'}, points=2)
        self.assertEqual(evaluate(question, 'a').points_earned, 2)
        self.assertFalse(evaluate(question, 'A').is_correct)
        self.assertFalse(evaluate(question, ['a']).is_correct)
        self.assertFalse(evaluate(question, None).is_correct)

    def test_true_false_accepts_booleans_and_option_ids(self):
        question = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.TRUE_FALSE,
            text='Water is wet',
            correct_answer={'type': 'single', 'value': 'true'},
        )
        self.assertTrue(evaluate(question, True).is_correct)
        self.assertTrue(evaluate(question, 'true').is_correct)
        self.assertFalse(evaluate(question, False).is_correct)

    def test_subjective_questions_are_never_auto_graded(self):
        for question_type in (Question.QuestionType.SHORT_ANSWER, Question.QuestionType.ESSAY):
            question = Question.objects.create(
                quiz=self.quiz,
                question_type=question_type,
                text='Explain osmosis',
                points=5,
                correct_answer={'type': 'single', 'value': 'diffusion of water'},
            )
            for answer in ('diffusion of water', '', None, ['x'], True):
                evaluation = evaluate(question, answer)
                self.assertIsNone(evaluation.is_correct)
                self.assertEqual(evaluation.points_earned, 0)

    def test_malformed_key_goes_to_review(self):
        question = choice_question(self.quiz, {'type': 'single', 'value': 'a'})
        Question.objects.filter(id=question.id).update(correct_answer={'type': 'bogus'})
        question.refresh_from_db()
        with self.assertLogs('quizzes.grading', level='WARNING'):
            evaluation = evaluate(question, 'a')
        self.assertIsNone(evaluation.is_correct)
        self.assertEqual(evaluation.points_earned, 0)

    def test_calculate_score(self):
        self.assertEqual(calculate_score(0, 0), 0)
        self.assertEqual(calculate_score(3, 4), 75)
        self.assertEqual(calculate_score(12, 10), 100)
        self.assertEqual(calculate_score(-1, 10), 0)


class PassingScoreTests(TestCase):
    def test_threshold_is_inclusive(self):
        quiz = Quiz(title='Threshold', passing_score=70)
        self.assertTrue(quiz.is_passing(70))
        self.assertFalse(quiz.is_passing(69.999))
        self.assertFalse(quiz.is_passing(None))


class AttemptStoreTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', UserProfile.Role.TEACHER)
        self.student = make_user('student')
        self.quiz = make_quiz(self.teacher)
        self.store = AttemptStore()

    def test_second_in_progress_insert_is_rejected(self):
        now = timezone.now()
        first = self.store.insert_attempt(self.quiz, self.student, 1, now)
        self.assertIsNotNone(first)
        self.assertIsNone(self.store.insert_attempt(self.quiz, self.student, 2, now))
        self.assertEqual(
            QuizAttempt.objects.filter(status=QuizAttempt.Status.IN_PROGRESS).count(), 1
        )

    def test_next_attempt_number_follows_the_highest(self):
        self.assertEqual(self.store.next_attempt_number(self.quiz, self.student), 1)
        QuizAttempt.objects.create(
            quiz=self.quiz, student=self.student, attempt_number=3, status=QuizAttempt.Status.SUBMITTED
        )
        self.assertEqual(self.store.next_attempt_number(self.quiz, self.student), 4)


class RaceLosingStore(AttemptStore):
    """Behaves as if another request inserted the attempt just before us."""

    def __init__(self, winner_factory):
        self.winner_factory = winner_factory
        self.winner = None

    def find_in_progress(self, quiz, student):
        return self.winner

    def insert_attempt(self, quiz, student, attempt_number, started_at):
        self.winner = self.winner_factory()
        return None


class QuizSessionManagerTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', UserProfile.Role.TEACHER)
        self.student = make_user('student')
        self.other_student = make_user('other')
        self.quiz = make_quiz(self.teacher, passing_score=70)
        self.q1 = choice_question(self.quiz, {'type': 'single', 'value': 'a'}, points=2)
        self.q2 = choice_question(self.quiz, {'type': 'multiple', 'value': ['a', 'b']}, points=2)
        self.essay = Question.objects.create(
            quiz=self.quiz,
            question_type=Question.QuestionType.ESSAY,
            text='Describe mitosis',
            points=6,
        )
        self.clock = FixedClock()
        self.manager = QuizSessionManager(clock=self.clock, grace_seconds=30)

    def test_get_or_create_resumes_existing_attempt(self):
        attempt, created = self.manager.get_or_create_attempt(self.quiz, self.student)
        again, created_again = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(attempt.id, again.id)
        self.assertEqual(attempt.attempt_number, 1)
        self.assertEqual(QuizAttempt.objects.count(), 1)

    def test_lost_race_returns_winning_attempt(self):
        winner = QuizAttempt.objects.create(quiz=self.quiz, student=self.student, attempt_number=1)
        manager = QuizSessionManager(store=RaceLosingStore(lambda: winner))
        attempt, created = manager.get_or_create_attempt(self.quiz, self.student)
        self.assertFalse(created)
        self.assertEqual(attempt.id, winner.id)

    def test_submit_grades_every_question(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.clock.advance(minutes=3)
        result = self.manager.submit_attempt(
            self.quiz,
            attempt.id,
            self.student,
            [
                {'question_id': self.q1.id, 'student_answer': 'a'},
                {'question_id': self.essay.id, 'student_answer': 'Cells split.'},
            ],
            time_spent=120,
        )
        self.assertEqual(result.total_points, 10)
        self.assertEqual(result.earned_points, 2)
        self.assertEqual(result.score, 20)
        self.assertFalse(result.passed)

        attempt.refresh_from_db()
        self.assertEqual(attempt.status, QuizAttempt.Status.SUBMITTED)
        self.assertEqual(attempt.time_spent, 120)
        self.assertIsNotNone(attempt.submitted_at)

        responses = {response.question_id: response for response in attempt.responses.all()}
        self.assertEqual(len(responses), 3)
        self.assertTrue(responses[self.q1.id].is_correct)
        self.assertIsNone(responses[self.q2.id].student_answer)
        self.assertFalse(responses[self.q2.id].is_correct)
        self.assertIsNone(responses[self.essay.id].is_correct)
        self.assertTrue(attempt.needs_review)

    def test_time_spent_is_clamped_to_elapsed(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.clock.advance(seconds=90)
        self.manager.submit_attempt(self.quiz, attempt.id, self.student, [], time_spent=5000)
        attempt.refresh_from_db()
        self.assertEqual(attempt.time_spent, 90)

    def test_other_student_cannot_submit(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        with self.assertRaises(Forbidden):
            self.manager.submit_attempt(
                self.quiz, attempt.id, self.other_student, [{'question_id': self.q1.id, 'student_answer': 'a'}]
            )
        self.assertEqual(QuestionResponse.objects.count(), 0)

    def test_resubmission_is_rejected(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.manager.submit_attempt(self.quiz, attempt.id, self.student, [])
        with self.assertRaises(AttemptAlreadySubmitted):
            self.manager.submit_attempt(self.quiz, attempt.id, self.student, [])
        self.assertEqual(QuestionResponse.objects.count(), 3)

    def test_next_attempt_is_numbered_after_submission(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.manager.submit_attempt(self.quiz, attempt.id, self.student, [])
        second, created = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.assertTrue(created)
        self.assertEqual(second.attempt_number, 2)

    def test_attempt_numbers_survive_a_deleted_attempt(self):
        first, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.manager.submit_attempt(self.quiz, first.id, self.student, [])
        second, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.manager.submit_attempt(self.quiz, second.id, self.student, [])
        first.delete()

        third, created = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.assertTrue(created)
        self.assertEqual(third.attempt_number, 3)

    def test_late_submission_is_rejected(self):
        self.quiz.time_limit = 10
        self.quiz.save()
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.clock.advance(minutes=10, seconds=20)
        self.manager.submit_attempt(self.quiz, attempt.id, self.student, [])

        second, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.clock.advance(minutes=11)
        with self.assertRaises(SubmissionDeadlinePassed):
            self.manager.submit_attempt(self.quiz, second.id, self.student, [])

    def test_unknown_and_duplicate_questions_are_rejected(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        with self.assertRaises(InvalidRequest):
            self.manager.submit_attempt(
                self.quiz, attempt.id, self.student, [{'question_id': 999999, 'student_answer': 'a'}]
            )
        with self.assertRaises(InvalidRequest):
            self.manager.submit_attempt(
                self.quiz,
                attempt.id,
                self.student,
                [
                    {'question_id': self.q1.id, 'student_answer': 'a'},
                    {'question_id': self.q1.id, 'student_answer': 'b'},
                ],
            )
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, QuizAttempt.Status.IN_PROGRESS)

    def test_manual_grading_finishes_review(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        with self.assertRaises(AttemptNotSubmitted):
            self.manager.grade_response(attempt, self.essay.id, self.teacher, 3)

        self.manager.submit_attempt(
            self.quiz,
            attempt.id,
            self.student,
            [
                {'question_id': self.q1.id, 'student_answer': 'a'},
                {'question_id': self.q2.id, 'student_answer': ['b', 'a']},
            ],
        )
        with self.assertRaises(InvalidRequest):
            self.manager.grade_response(attempt, self.essay.id, self.teacher, 7)

        response = self.manager.grade_response(attempt, self.essay.id, self.teacher, 3, feedback='Half right.')
        self.assertFalse(response.is_correct)
        self.assertEqual(response.graded_by, self.teacher)

        attempt.refresh_from_db()
        self.assertEqual(attempt.status, QuizAttempt.Status.GRADED)
        self.assertEqual(attempt.earned_points, 7)
        self.assertEqual(attempt.score, 70)
        self.assertTrue(attempt.passed)
        self.assertIsNotNone(attempt.graded_at)

    def test_manual_grade_is_capped_at_submitted_points(self):
        attempt, _ = self.manager.get_or_create_attempt(self.quiz, self.student)
        self.manager.submit_attempt(
            self.quiz, attempt.id, self.student, [{'question_id': self.q1.id, 'student_answer': 'a'}]
        )
        self.essay.points = 20
        self.essay.save()

        with self.assertRaises(InvalidRequest):
            self.manager.grade_response(attempt, self.essay.id, self.teacher, 7)
        response = self.manager.grade_response(attempt, self.essay.id, self.teacher, 6)
        self.assertTrue(response.is_correct)
        self.assertEqual(response.points_possible, 6)

        attempt.refresh_from_db()
        self.assertEqual(attempt.total_points, 10)
        self.assertEqual(attempt.earned_points, 8)
        self.assertEqual(attempt.score, 80)


class StatsTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', UserProfile.Role.TEACHER)
        self.quiz = make_quiz(self.teacher, passing_score=70)

    def _attempt(self, username, status, score=None):
        student = make_user(username)
        return QuizAttempt.objects.create(
            quiz=self.quiz, student=student, status=status, score=score, submitted_at=timezone.now()
        )

    def test_in_progress_attempts_are_ignored(self):
        for index, score in enumerate([60, 80, 100]):
            self._attempt(f'done{index}', QuizAttempt.Status.SUBMITTED, score)
        self._attempt('busy1', QuizAttempt.Status.IN_PROGRESS)
        self._attempt('busy2', QuizAttempt.Status.IN_PROGRESS)

        stats = aggregate_quiz_stats(self.quiz)
        self.assertEqual(stats['total_submissions'], 5)
        self.assertEqual(stats['submitted'], 3)
        self.assertEqual(stats['passed'], 2)
        self.assertEqual(stats['average_score'], 80)
        self.assertEqual(stats['pass_rate'], 67)
        self.assertEqual(stats['score_distribution']['median'], 80)
        self.assertEqual(stats['score_distribution']['min'], 60)

    def test_empty_quiz(self):
        stats = aggregate_quiz_stats(self.quiz)
        self.assertEqual(stats['average_score'], 0)
        self.assertEqual(stats['pass_rate'], 0)
        self.assertEqual(score_distribution([])['std_dev'], None)

    def test_student_stats(self):
        question = choice_question(self.quiz, {'type': 'single', 'value': 'a'})
        finished = self._attempt('learner', QuizAttempt.Status.SUBMITTED, 100)
        QuestionResponse.objects.create(
            attempt=finished, question=question, student_answer='a', is_correct=True, points_earned=1
        )
        QuizAttempt.objects.create(
            quiz=self.quiz, student=finished.student, attempt_number=2, status=QuizAttempt.Status.IN_PROGRESS
        )

        result = aggregate_student_stats(finished.student)
        self.assertEqual(len(result['quiz_progress']), 2)
        self.assertEqual(result['stats']['total_attempts'], 2)
        self.assertEqual(result['stats']['submitted_quizzes'], 1)
        self.assertEqual(result['stats']['passed_quizzes'], 1)
        self.assertEqual(result['stats']['average_score'], 100)
        self.assertEqual(result['stats']['correct_answers'], 1)
        self.assertEqual(result['stats']['total_questions'], 1)


class FilterQuizTests(TestCase):
    def test_correct_answers_never_leak(self):
        teacher = make_user('teacher', UserProfile.Role.TEACHER)
        for mode in Quiz.Mode.values:
            quiz = make_quiz(teacher, title=f'{mode} quiz', mode=mode)
            question = choice_question(quiz, {'type': 'single', 'value': 'a'})
            question.explanation = 'Because a.'
            question.save()
            for role in UserProfile.Role.values:
                view = filter_quiz_for_role(quiz, role, QuizAttempt.Status.SUBMITTED)
                for payload in view['questions']:
                    self.assertNotIn('correct_answer', payload)
                    self.assertEqual('explanation' in payload, mode == Quiz.Mode.PRACTICE)

    def test_role_and_status_are_only_echoed(self):
        teacher = make_user('teacher', UserProfile.Role.TEACHER)
        quiz = make_quiz(teacher)
        choice_question(quiz, {'type': 'single', 'value': 'a'})
        student_view = filter_quiz_for_role(quiz, UserProfile.Role.STUDENT)
        parent_view = filter_quiz_for_role(quiz, UserProfile.Role.PARENT, QuizAttempt.Status.GRADED)
        self.assertEqual(student_view['questions'], parent_view['questions'])
        self.assertEqual(parent_view['viewer_role'], UserProfile.Role.PARENT)
        self.assertEqual(parent_view['attempt_status'], QuizAttempt.Status.GRADED)
