from rest_framework import status

from courses.models import CourseContent
from quizzes.models import Question, Quiz
from .base import QuizAPITestCase


class TeacherQuizTests(QuizAPITestCase):
    def setUp(self):
        super().setUp()
        self.quiz_list_url = self.url('teacher-quiz-list')

    def test_create_quiz_on_own_course(self):
        content = CourseContent.objects.create(course=self.course, title='Energy', order=2)
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(
            self.quiz_list_url,
            {'content': content.id, 'title': 'Energy quiz', 'passing_score': 50, 'mode': 'PRACTICE'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Quiz.objects.get(content=content).mode, Quiz.Mode.PRACTICE)

    def test_cannot_attach_quiz_to_foreign_course(self):
        content = CourseContent.objects.create(course=self.course, title='Energy', order=2)
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.post(self.quiz_list_url, {'content': content.id, 'title': 'Stolen'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('content', response.data)

    def test_content_holds_a_single_quiz(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(self.quiz_list_url, {'content': self.content.id, 'title': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_passing_score_must_be_a_percentage(self):
        content = CourseContent.objects.create(course=self.course, title='Energy', order=2)
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(
            self.quiz_list_url, {'content': content.id, 'title': 'Energy quiz', 'passing_score': 120}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_scoped_to_own_quizzes(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(self.quiz_list_url)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['total_points'], 5)

        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.quiz_list_url)
        self.assertEqual(response.data, [])

    def test_update_and_delete_quiz(self):
        self.client.force_authenticate(user=self.teacher)
        url = self.url('teacher-quiz-detail', self.quiz.id)
        response = self.client.patch(url, {'time_limit': 15}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.quiz.refresh_from_db()
        self.assertEqual(self.quiz.time_limit, 15)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Quiz.objects.exists())

    def test_students_cannot_author(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(self.quiz_list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class QuizQuestionTests(QuizAPITestCase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.teacher)
        self.questions_url = self.url('quiz-questions', self.quiz.id)

    def test_list_questions_in_order(self):
        response = self.client.get(self.questions_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['order'] for item in response.data], [1, 2, 3])

    def test_create_true_false_question(self):
        response = self.client.post(
            self.questions_url,
            {
                'question_type': 'TRUE_FALSE',
                'text': 'Light travels in a vacuum.',
                'points': 1,
                'correct_answer': {'type': 'single', 'value': True},
            },
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order'], 4)
        self.assertEqual([option['id'] for option in response.data['options']], ['true', 'false'])

    def test_invalid_answer_key_is_rejected(self):
        response = self.client.post(
            self.questions_url,
            {
                'question_type': 'MULTIPLE_CHOICE',
                'text': 'Pick one',
                'options': [{'id': 'a', 'text': 'A'}],
                'correct_answer': {'type': 'single', 'value': 'b'},
            },
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('correct_answer', response.data)

        response = self.client.post(
            self.questions_url,
            {
                'question_type': 'MULTIPLE_CHOICE',
                'text': 'Pick one',
                'options': [{'id': 'a', 'text': 'A'}],
                'correct_answer': 'a',
            },
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.quiz.questions.count(), 3)

    def test_duplicate_position_is_rejected(self):
        response = self.client.post(
            self.questions_url,
            {'question_type': 'ESSAY', 'text': 'Discuss.', 'order': 1},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('order', response.data)

    def test_update_question(self):
        url = self.url('quiz-question-detail', self.quiz.id, self.essay.id)
        response = self.client.patch(url, {'points': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'points': 4, 'text': 'Explain inertia with an example.'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.essay.refresh_from_db()
        self.assertEqual(self.essay.points, 4)

    def test_delete_question(self):
        url = self.url('quiz-question-detail', self.quiz.id, self.essay.id)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Question.objects.filter(id=self.essay.id).exists())

    def test_answered_question_keeps_its_points(self):
        self.submit(self.start_attempt(), self.full_marks_answers())
        self.client.force_authenticate(user=self.teacher)
        url = self.url('quiz-question-detail', self.quiz.id, self.essay.id)

        response = self.client.patch(url, {'points': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('points', response.data)

        response = self.client.patch(url, {'text': 'Explain inertia in one paragraph.'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.essay.refresh_from_db()
        self.assertEqual(self.essay.points, 2)

    def test_answered_question_cannot_be_deleted(self):
        self.submit(self.start_attempt(), self.full_marks_answers())
        self.client.force_authenticate(user=self.teacher)
        url = self.url('quiz-question-detail', self.quiz.id, self.essay.id)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Question.objects.filter(id=self.essay.id).exists())

        response = self.client.delete(self.url('teacher-quiz-detail', self.quiz.id))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Question.objects.exists())

    def test_other_teacher_cannot_see_questions(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.questions_url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
