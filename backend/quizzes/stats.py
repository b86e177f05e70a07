import numpy as np

from .models import QuizAttempt


def _finished(attempts):
    return [attempt for attempt in attempts if attempt.status in QuizAttempt.FINISHED_STATUSES]


def _mean_score(attempts) -> float:
    if not attempts:
        return 0
    return sum(attempt.score or 0 for attempt in attempts) / len(attempts)


def score_distribution(scores):
    if not scores:
        return {'min': None, 'max': None, 'median': None, 'std_dev': None}
    values = np.array(scores, dtype=float)
    return {
        'min': round(float(values.min()), 2),
        'max': round(float(values.max()), 2),
        'median': round(float(np.median(values)), 2),
        'std_dev': round(float(values.std()), 2),
    }


def summarize_attempt(attempt) -> dict:
    responses = list(attempt.responses.all())
    student = attempt.student
    name = f"{student.first_name} {student.last_name}".strip() or student.get_username()
    return {
        'id': attempt.id,
        'student_id': student.id,
        'student_name': name,
        'student_email': student.email,
        'score': attempt.score,
        'earned_points': attempt.earned_points,
        'total_points': attempt.total_points,
        'passed': attempt.passed,
        'status': attempt.status,
        'attempt_number': attempt.attempt_number,
        'started_at': attempt.started_at,
        'submitted_at': attempt.submitted_at,
        'time_spent': attempt.time_spent,
        'correct_answers': sum(1 for response in responses if response.is_correct is True),
        'total_questions': len(responses),
        'needs_review': any(response.is_correct is None for response in responses),
    }


def aggregate_quiz_stats(quiz, attempts=None) -> dict:
    if attempts is None:
        attempts = list(quiz.attempts.prefetch_related('responses'))
    submitted = _finished(attempts)
    passed = [attempt for attempt in submitted if quiz.is_passing(attempt.score)]
    return {
        'total_submissions': len(attempts),
        'submitted': len(submitted),
        'passed': len(passed),
        'average_score': round(_mean_score(submitted)),
        'pass_rate': round(len(passed) / len(submitted) * 100) if submitted else 0,
        'needs_review': sum(
            1 for attempt in submitted
            if any(response.is_correct is None for response in attempt.responses.all())
        ),
        'score_distribution': score_distribution([attempt.score or 0 for attempt in submitted]),
    }


def aggregate_student_stats(student) -> dict:
    attempts = list(
        student.quiz_attempts
        .select_related('quiz__content__course')
        .prefetch_related('responses')
        .order_by('-started_at')
    )
    progress = []
    for attempt in attempts:
        quiz = attempt.quiz
        summary = summarize_attempt(attempt)
        summary.update(
            {
                'quiz_id': quiz.id,
                'quiz_title': quiz.title,
                'course_title': quiz.content.course.title,
            }
        )
        progress.append(summary)
    submitted = _finished(attempts)
    submitted_rows = [row for row in progress if row['status'] in QuizAttempt.FINISHED_STATUSES]
    return {
        'quiz_progress': progress,
        'stats': {
            'total_attempts': len(attempts),
            'submitted_quizzes': len(submitted),
            'passed_quizzes': sum(1 for attempt in submitted if attempt.passed),
            'average_score': round(_mean_score(submitted)),
            'correct_answers': sum(row['correct_answers'] for row in submitted_rows),
            'total_questions': sum(row['total_questions'] for row in submitted_rows),
        },
    }
