from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from courses.models import CourseContent
from .answers import InvalidAnswerKey, MultipleAnswer, parse_answer_key


TRUE_FALSE_OPTIONS = [{'id': 'true', 'text': 'True'}, {'id': 'false', 'text': 'False'}]


class Quiz(models.Model):
    class Mode(models.TextChoices):
        EXAM = 'EXAM', 'Exam'
        PRACTICE = 'PRACTICE', 'Practice'

    content = models.OneToOneField(CourseContent, on_delete=models.CASCADE, related_name='quiz')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    passing_score = models.FloatField(
        default=70,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Percentage of the total points needed to pass.',
    )
    time_limit = models.PositiveIntegerField(null=True, blank=True, help_text='Minutes allowed per attempt.')
    mode = models.CharField(max_length=16, choices=Mode.choices, default=Mode.EXAM)
    show_answers_after = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'quizzes'

    def __str__(self) -> str:
        return self.title

    @property
    def course(self):
        return self.content.course

    @property
    def total_points(self) -> float:
        return sum(question.points for question in self.questions.all())

    def is_passing(self, score) -> bool:
        return score is not None and score >= self.passing_score


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = 'MULTIPLE_CHOICE', 'Multiple choice'
        TRUE_FALSE = 'TRUE_FALSE', 'True / false'
        SHORT_ANSWER = 'SHORT_ANSWER', 'Short answer'
        ESSAY = 'ESSAY', 'Essay'

    CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name='questions')
    question_type = models.CharField(max_length=32, choices=QuestionType.choices)
    text = models.TextField()
    order = models.IntegerField()
    points = models.FloatField(default=1)
    options = models.JSONField(default=list, blank=True)
    correct_answer = models.JSONField(null=True, blank=True)
    explanation = models.TextField(blank=True)

    class Meta:
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['quiz', 'order'], name='unique_quiz_question_order')
        ]

    def __str__(self) -> str:
        return f"{self.quiz.title}: Q{self.order}"

    @property
    def is_auto_gradable(self) -> bool:
        return self.question_type in self.CHOICE_TYPES

    def option_ids(self) -> list:
        ids = []
        for option in self.options or []:
            if isinstance(option, dict):
                ids.append(option.get('id'))
            else:
                ids.append(option)
        return ids

    def answer_key(self):
        """Parsed correct-answer spec, or None for subjective questions without one."""
        if self.correct_answer is None:
            return None
        return parse_answer_key(self.correct_answer)

    def clean(self):
        if self.points is None or self.points <= 0:
            raise ValidationError({'points': 'Points must be greater than zero.'})
        if self.question_type == self.QuestionType.TRUE_FALSE and not self.options:
            self.options = list(TRUE_FALSE_OPTIONS)
        if self.is_auto_gradable and not self.options:
            raise ValidationError({'options': 'Choice questions need at least one option.'})
        if self.options and not isinstance(self.options, list):
            raise ValidationError({'options': 'Options must be a list.'})
        if not self.is_auto_gradable:
            if self.correct_answer is not None:
                self._parse_key()
            return
        if self.correct_answer is None:
            raise ValidationError({'correct_answer': 'Choice questions need a correct answer.'})
        key = self._parse_key()
        option_ids = self.option_ids()
        if isinstance(key, MultipleAnswer):
            if self.question_type != self.QuestionType.MULTIPLE_CHOICE:
                raise ValidationError({'correct_answer': 'Only multiple choice questions accept several answers.'})
            unknown = [value for value in key.values if value not in option_ids]
            if unknown:
                raise ValidationError({'correct_answer': f'Unknown options: {", ".join(unknown)}.'})
        elif self.question_type == self.QuestionType.TRUE_FALSE:
            # Booleans are graded as the "true" / "false" option ids.
            value = key.value
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            if value not in option_ids:
                raise ValidationError({'correct_answer': f'Unknown option: {key.value}.'})
        elif key.value not in option_ids:
            raise ValidationError({'correct_answer': f'Unknown option: {key.value}.'})

    def _parse_key(self):
        try:
            return parse_answer_key(self.correct_answer)
        except InvalidAnswerKey as exc:
            raise ValidationError({'correct_answer': str(exc)}) from exc

    def save(self, *args, **kwargs):
        if self.order is None:
            last_order = (
                self.__class__.objects.filter(quiz=self.quiz).aggregate(models.Max('order'))['order__max'] or 0
            )
            self.order = last_order + 1
        self.clean()
        return super().save(*args, **kwargs)


class QuizAttempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = 'IN_PROGRESS', 'In progress'
        SUBMITTED = 'SUBMITTED', 'Submitted'
        GRADED = 'GRADED', 'Graded'

    FINISHED_STATUSES = (Status.SUBMITTED, Status.GRADED)

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name='attempts')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='quiz_attempts')
    attempt_number = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.IN_PROGRESS)
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    graded_at = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(null=True, blank=True, help_text='Seconds reported by the client.')
    score = models.FloatField(null=True, blank=True)
    earned_points = models.FloatField(null=True, blank=True)
    total_points = models.FloatField(null=True, blank=True)

    class Meta:
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['quiz', 'student'],
                condition=models.Q(status='IN_PROGRESS'),
                name='unique_in_progress_attempt',
            ),
            models.UniqueConstraint(fields=['quiz', 'student', 'attempt_number'], name='unique_attempt_number'),
        ]

    def __str__(self) -> str:
        return f"Attempt {self.attempt_number} by {self.student} on {self.quiz.title}"

    @property
    def is_finished(self) -> bool:
        return self.status in self.FINISHED_STATUSES

    @property
    def passed(self) -> bool:
        return self.quiz.is_passing(self.score)

    @property
    def needs_review(self) -> bool:
        return any(response.is_correct is None for response in self.responses.all())


class QuestionResponse(models.Model):
    attempt = models.ForeignKey(QuizAttempt, on_delete=models.CASCADE, related_name='responses')
    question = models.ForeignKey(Question, on_delete=models.RESTRICT, related_name='responses')
    student_answer = models.JSONField(null=True, blank=True)
    is_correct = models.BooleanField(null=True, blank=True)
    points_earned = models.FloatField(default=0)
    points_possible = models.FloatField(default=0, help_text='Question points at the time of submission.')
    feedback = models.TextField(blank=True)
    graded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='graded_responses',
    )
    graded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['question__order']
        constraints = [
            models.UniqueConstraint(fields=['attempt', 'question'], name='unique_attempt_question_response')
        ]

    def __str__(self) -> str:
        return f"Attempt {self.attempt_id} - Q{self.question.order}"

    @property
    def pending_review(self) -> bool:
        return self.is_correct is None
