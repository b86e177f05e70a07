from rest_framework import status

from .base import QuizAPITestCase


class AttemptResultsTests(QuizAPITestCase):
    def results(self, attempt_id, user):
        self.client.force_authenticate(user=user)
        return self.client.get(self.url('attempt-results', attempt_id))

    def test_answers_revealed_after_submission(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        response = self.results(submission_id, self.student)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['answers_revealed'])
        first = response.data['responses'][0]
        self.assertEqual(first['correct_answer'], {'type': 'multiple', 'value': ['velocity', 'force']})
        self.assertNotIn('explanation', first)
        self.assertTrue(response.data['responses'][2]['pending_review'])

    def test_answers_hidden_when_quiz_disallows_it(self):
        self.quiz.show_answers_after = False
        self.quiz.save()
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        response = self.results(submission_id, self.student)
        self.assertFalse(response.data['answers_revealed'])
        for entry in response.data['responses']:
            self.assertNotIn('correct_answer', entry)

        teacher_view = self.results(submission_id, self.teacher)
        self.assertTrue(teacher_view.data['answers_revealed'])
        self.assertEqual(teacher_view.data['responses'][0]['explanation'], 'Vectors have a direction.')

    def test_in_progress_attempt_hides_answers(self):
        submission_id = self.start_attempt()
        response = self.results(submission_id, self.student)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['answers_revealed'])
        self.assertEqual(response.data['responses'], [])

    def test_verified_parent_can_view(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        self.assertEqual(self.results(submission_id, self.parent).status_code, status.HTTP_200_OK)

    def test_unverified_parent_and_other_student_are_denied(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        for user in (self.unverified_parent, self.other_student, self.other_teacher):
            response = self.results(submission_id, user)
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
            self.assertEqual(response.data['detail'], 'Access denied.')

    def test_missing_attempt_looks_like_forbidden(self):
        response = self.results(999999, self.student)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'Access denied.')


class QuizProgressTests(QuizAPITestCase):
    def setUp(self):
        super().setUp()
        self.submit(self.start_attempt(), self.full_marks_answers())
        self.start_attempt()

    def test_student_sees_own_progress(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.url('student-quiz-progress'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['student']['username'], 'student')
        self.assertEqual(len(response.data['quiz_progress']), 2)
        stats = response.data['stats']
        self.assertEqual(stats['total_attempts'], 2)
        self.assertEqual(stats['submitted_quizzes'], 1)
        self.assertEqual(stats['average_score'], 60)
        self.assertEqual(stats['correct_answers'], 2)
        self.assertEqual(stats['total_questions'], 3)

    def test_verified_parent_sees_child_progress(self):
        self.client.force_authenticate(user=self.parent)
        response = self.client.get(self.url('parent-child-quiz-progress', self.student.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['submitted_quizzes'], 1)
        self.assertEqual(response.data['quiz_progress'][0]['course_title'], 'Physics')

    def test_unverified_parent_is_denied(self):
        self.client.force_authenticate(user=self.unverified_parent)
        response = self.client.get(self.url('parent-child-quiz-progress', self.student.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_parent_cannot_view_unrelated_student(self):
        self.client.force_authenticate(user=self.parent)
        response = self.client.get(self.url('parent-child-quiz-progress', self.other_student.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
