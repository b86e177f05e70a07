import csv
import logging

import openpyxl
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsTeacher
from quizzes.models import QuizAttempt
from quizzes.serializers import QuestionResponseSerializer, ResponseGradeSerializer
from quizzes.sessions import QuizSessionManager
from quizzes.stats import summarize_attempt
from .submissions import managed_quiz, quiz_attempts

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    'Student',
    'Email',
    'Attempt',
    'Status',
    'Score',
    'Earned Points',
    'Total Points',
    'Passed',
    'Correct Answers',
    'Total Questions',
    'Needs Review',
    'Submitted At',
    'Time Spent (s)',
]


class ResponseGradeView(APIView):
    permission_classes = [IsTeacher]

    def put(self, request, quiz_id, attempt_id, question_id):
        quiz = managed_quiz(request, quiz_id)
        attempt = get_object_or_404(QuizAttempt.objects.filter(quiz=quiz), id=attempt_id)
        serializer = ResponseGradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        graded = QuizSessionManager().grade_response(
            attempt,
            question_id,
            request.user,
            data['points_earned'],
            is_correct=data.get('is_correct'),
            feedback=data.get('feedback', ''),
        )
        attempt.refresh_from_db()
        return Response(
            {
                'response': QuestionResponseSerializer(graded).data,
                'attempt': {
                    'id': attempt.id,
                    'status': attempt.status,
                    'score': attempt.score,
                    'earned_points': attempt.earned_points,
                    'total_points': attempt.total_points,
                    'passed': attempt.passed,
                    'graded_at': attempt.graded_at,
                },
            }
        )


class QuizGradeExportView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, quiz_id):
        quiz = managed_quiz(request, quiz_id)
        rows = [
            self._row(summarize_attempt(attempt))
            for attempt in quiz_attempts(quiz)
            if attempt.is_finished
        ]
        file_type = 'xlsx' if request.query_params.get('file_type') == 'xlsx' else 'csv'
        logger.info('Exporting %s grade rows for quiz %s as %s', len(rows), quiz.id, file_type)
        if file_type == 'xlsx':
            return self._xlsx_response(quiz, rows)
        return self._csv_response(quiz, rows)

    def _row(self, summary):
        submitted_at = summary['submitted_at']
        return [
            summary['student_name'],
            summary['student_email'],
            summary['attempt_number'],
            summary['status'],
            round(summary['score'] or 0, 2),
            summary['earned_points'],
            summary['total_points'],
            'Yes' if summary['passed'] else 'No',
            summary['correct_answers'],
            summary['total_questions'],
            'Yes' if summary['needs_review'] else 'No',
            submitted_at.isoformat() if submitted_at else '',
            summary['time_spent'],
        ]

    def _csv_response(self, quiz, rows):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="quiz_{quiz.id}_grades.csv"'
        writer = csv.writer(response)
        writer.writerow(EXPORT_HEADERS)
        writer.writerows(rows)
        return response

    def _xlsx_response(self, quiz, rows):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'Grades'
        ws.append(EXPORT_HEADERS)
        for row in rows:
            ws.append(row)
        response = HttpResponse(content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
        response['Content-Disposition'] = f'attachment; filename="quiz_{quiz.id}_grades.xlsx"'
        wb.save(response)
        return response
