import csv
import io

import openpyxl
from rest_framework import status

from quizzes.models import QuizAttempt
from .base import QuizAPITestCase


class QuizSubmissionListTests(QuizAPITestCase):
    def test_teacher_sees_submissions_and_stats(self):
        self.submit(self.start_attempt(), self.full_marks_answers())
        self.start_attempt(self.other_student)

        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(self.url('quiz-submissions', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['submissions']), 2)

        stats = response.data['stats']
        self.assertEqual(stats['total_submissions'], 2)
        self.assertEqual(stats['submitted'], 1)
        self.assertEqual(stats['passed'], 0)
        self.assertEqual(stats['average_score'], 60)
        self.assertEqual(stats['needs_review'], 1)

        finished = next(row for row in response.data['submissions'] if row['student_id'] == self.student.id)
        self.assertEqual(finished['student_name'], 'Sam Lee')
        self.assertEqual(finished['correct_answers'], 2)
        self.assertEqual(finished['total_questions'], 3)
        self.assertTrue(finished['needs_review'])

    def test_other_teacher_is_denied(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.url('quiz-submissions', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_students_are_denied(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.url('quiz-submissions', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ResponseGradeTests(QuizAPITestCase):
    def grade(self, attempt_id, question_id, payload, user=None):
        self.client.force_authenticate(user=user or self.teacher)
        return self.client.put(
            self.url('response-grade', self.quiz.id, attempt_id, question_id), payload, format='json'
        )

    def test_grading_last_pending_response_finishes_attempt(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())

        response = self.grade(submission_id, self.essay.id, {'points_earned': 2, 'feedback': 'Clear.'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['response']['is_correct'])
        self.assertEqual(response.data['response']['feedback'], 'Clear.')
        self.assertEqual(response.data['attempt']['status'], QuizAttempt.Status.GRADED)
        self.assertEqual(response.data['attempt']['score'], 100)
        self.assertTrue(response.data['attempt']['passed'])

    def test_points_above_question_value_are_rejected(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        response = self.grade(submission_id, self.essay.id, {'points_earned': 5})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(QuizAttempt.objects.get(id=submission_id).status, QuizAttempt.Status.SUBMITTED)

    def test_in_progress_attempt_cannot_be_graded(self):
        submission_id = self.start_attempt()
        response = self.grade(submission_id, self.essay.id, {'points_earned': 1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_teacher_cannot_grade(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        response = self.grade(submission_id, self.essay.id, {'points_earned': 1}, user=self.other_teacher)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class QuizGradeExportTests(QuizAPITestCase):
    def setUp(self):
        super().setUp()
        self.submit(self.start_attempt(), self.full_marks_answers())
        self.start_attempt(self.other_student)
        self.client.force_authenticate(user=self.teacher)

    def test_csv_export_lists_finished_attempts(self):
        response = self.client.get(self.url('quiz-submissions-export', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0][0], 'Student')
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1][0], 'Sam Lee')
        self.assertEqual(rows[1][4], '60.0')

    def test_xlsx_export(self):
        response = self.client.get(self.url('quiz-submissions-export', self.quiz.id), {'file_type': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        workbook = openpyxl.load_workbook(io.BytesIO(response.content))
        sheet = workbook.active
        self.assertEqual(sheet.title, 'Grades')
        self.assertEqual(sheet.max_row, 2)
        self.assertEqual(sheet.cell(row=2, column=2).value, 'student@example.com')
