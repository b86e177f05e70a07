from rest_framework import status

from quizzes.models import Quiz, QuizAttempt, QuestionResponse
from .base import QuizAPITestCase


class QuizDetailTests(QuizAPITestCase):
    def test_student_gets_quiz_and_attempt(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['submission_id'])
        quiz_view = response.data['quiz']
        self.assertEqual(quiz_view['attempt_status'], QuizAttempt.Status.IN_PROGRESS)
        self.assertEqual([q['id'] for q in quiz_view['questions']], [self.choice.id, self.true_false.id, self.essay.id])
        for question in quiz_view['questions']:
            self.assertNotIn('correct_answer', question)
            self.assertNotIn('explanation', question)

    def test_repeated_requests_resume_the_same_attempt(self):
        first = self.start_attempt()
        second = self.start_attempt()
        self.assertEqual(first, second)
        self.assertEqual(QuizAttempt.objects.filter(quiz=self.quiz, student=self.student).count(), 1)

    def test_practice_mode_includes_explanations(self):
        self.quiz.mode = Quiz.Mode.PRACTICE
        self.quiz.save()
        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertEqual(response.data['quiz']['questions'][0]['explanation'], 'Vectors have a direction.')
        self.assertNotIn('correct_answer', response.data['quiz']['questions'][0])

    def test_unassigned_student_is_denied(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'Access denied.')
        self.assertFalse(QuizAttempt.objects.filter(student=self.outsider).exists())

    def test_directly_assigned_student_can_take_quiz(self):
        self.assertIsNotNone(self.start_attempt(self.other_student))

    def test_owning_teacher_previews_without_attempt(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['submission_id'])
        self.assertFalse(QuizAttempt.objects.exists())

    def test_other_teacher_is_denied(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_request_is_rejected(self):
        response = self.client.get(self.url('quiz-detail', self.quiz.id))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class QuizSubmitTests(QuizAPITestCase):
    def test_submit_grades_objective_questions(self):
        submission_id = self.start_attempt()
        response = self.submit(submission_id, self.full_marks_answers(), time_spent=42)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['earned_points'], 3)
        self.assertEqual(response.data['total_points'], 5)
        self.assertEqual(response.data['score'], 60)
        self.assertFalse(response.data['passed'])
        self.assertEqual(response.data['status'], QuizAttempt.Status.SUBMITTED)

        responses = QuestionResponse.objects.filter(attempt_id=submission_id)
        self.assertEqual(responses.count(), 3)
        self.assertIsNone(responses.get(question=self.essay).is_correct)
        self.assertTrue(responses.get(question=self.true_false).is_correct)

    def test_unanswered_questions_score_zero(self):
        submission_id = self.start_attempt()
        response = self.submit(submission_id, [{'question_id': self.true_false.id, 'student_answer': 'false'}])
        self.assertEqual(response.data['total_points'], 5)
        self.assertEqual(response.data['score'], 20)
        unanswered = QuestionResponse.objects.get(attempt_id=submission_id, question=self.choice)
        self.assertIsNone(unanswered.student_answer)
        self.assertFalse(unanswered.is_correct)

    def test_resubmission_is_rejected(self):
        submission_id = self.start_attempt()
        self.submit(submission_id, self.full_marks_answers())
        response = self.submit(submission_id, self.full_marks_answers())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(QuestionResponse.objects.filter(attempt_id=submission_id).count(), 3)

    def test_other_student_cannot_submit_attempt(self):
        submission_id = self.start_attempt()
        response = self.submit(submission_id, self.full_marks_answers(), user=self.other_student)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'Access denied.')
        self.assertFalse(QuestionResponse.objects.exists())
        self.assertEqual(QuizAttempt.objects.get(id=submission_id).status, QuizAttempt.Status.IN_PROGRESS)

    def test_malformed_payload_is_rejected(self):
        submission_id = self.start_attempt()
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            self.url('quiz-submit', self.quiz.id),
            {'submission_id': submission_id, 'answers': 'velocity'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.submit(submission_id, [{'question_id': self.choice.id, 'student_answer': {'id': 'force'}}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.submit(submission_id, [{'question_id': 0, 'student_answer': 'force'}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(QuestionResponse.objects.exists())

    def test_teacher_cannot_submit(self):
        submission_id = self.start_attempt()
        response = self.submit(submission_id, self.full_marks_answers(), user=self.teacher)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
