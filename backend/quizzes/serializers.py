from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from courses.models import CourseContent
from .answers import is_valid_student_answer
from .models import Quiz, Question, QuestionResponse
from .policy import AccessPolicy


class QuestionSerializer(serializers.ModelSerializer):
    order = serializers.IntegerField(required=False)

    class Meta:
        model = Question
        fields = [
            'id',
            'quiz',
            'question_type',
            'text',
            'order',
            'points',
            'options',
            'correct_answer',
            'explanation',
        ]
        read_only_fields = ['quiz']

    def validate(self, attrs):
        if self._is_answered() and 'points' in attrs and attrs['points'] != self.instance.points:
            raise serializers.ValidationError({'points': 'Points cannot change once students have answered.'})
        instance = Question(**{**self._current_values(), **attrs})
        quiz = self.context.get('quiz') or getattr(self.instance, 'quiz', None)
        if quiz is not None and instance.order is not None:
            taken = Question.objects.filter(quiz=quiz, order=instance.order)
            if self.instance is not None:
                taken = taken.exclude(pk=self.instance.pk)
            if taken.exists():
                raise serializers.ValidationError({'order': 'Another question already uses this position.'})
        try:
            instance.clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.message_dict) from exc
        attrs['options'] = instance.options
        return attrs

    def _is_answered(self):
        return self.instance is not None and self.instance.responses.exists()

    def _current_values(self):
        if self.instance is None:
            return {}
        return {
            field: getattr(self.instance, field)
            for field in ['question_type', 'text', 'order', 'points', 'options', 'correct_answer', 'explanation']
        }


class QuizSerializer(serializers.ModelSerializer):
    content = serializers.PrimaryKeyRelatedField(queryset=CourseContent.objects.all())
    course_title = serializers.CharField(source='content.course.title', read_only=True)
    questions = QuestionSerializer(many=True, read_only=True)
    total_points = serializers.FloatField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            'id',
            'content',
            'course_title',
            'title',
            'description',
            'passing_score',
            'time_limit',
            'mode',
            'show_answers_after',
            'total_points',
            'questions',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_content(self, value):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if user is not None and not AccessPolicy.for_user(user).can_manage_course(value.course):
            raise serializers.ValidationError('You can only attach quizzes to your own courses.')
        existing = Quiz.objects.filter(content=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError('This content already has a quiz.')
        return value


class AnswerInputSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    student_answer = serializers.JSONField(allow_null=True, required=False)

    def validate_student_answer(self, value):
        if not is_valid_student_answer(value):
            raise serializers.ValidationError('Answers must be a string, a boolean or a list of strings.')
        return value


class SubmitAttemptSerializer(serializers.Serializer):
    submission_id = serializers.IntegerField()
    answers = AnswerInputSerializer(many=True, allow_empty=True)
    time_spent = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class QuestionResponseSerializer(serializers.ModelSerializer):
    question_text = serializers.CharField(source='question.text', read_only=True)
    question_points = serializers.FloatField(source='question.points', read_only=True)

    class Meta:
        model = QuestionResponse
        fields = [
            'id',
            'question',
            'question_text',
            'question_points',
            'student_answer',
            'is_correct',
            'points_earned',
            'points_possible',
            'feedback',
            'graded_by',
            'graded_at',
        ]
        read_only_fields = fields


class ResponseGradeSerializer(serializers.Serializer):
    points_earned = serializers.FloatField(min_value=0)
    is_correct = serializers.BooleanField(required=False, allow_null=True, default=None)
    feedback = serializers.CharField(required=False, allow_blank=True, default='')
