from django.conf import settings
from django.db import models


class Course(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='taught_courses')

    def __str__(self) -> str:
        return self.title


class CourseContent(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='contents')
    title = models.CharField(max_length=255)
    order = models.IntegerField(default=0)

    class Meta:
        ordering = ['order']

    def __str__(self) -> str:
        return f"{self.course.title}: {self.title}"


class CourseAssignment(models.Model):
    """Grants a single student, or every student of a class, access to a course."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='assignments')
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='course_assignments',
    )
    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='course_assignments',
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(student__isnull=False, school_class__isnull=True)
                    | models.Q(student__isnull=True, school_class__isnull=False)
                ),
                name='course_assignment_single_target',
            )
        ]

    def __str__(self) -> str:
        target = self.student or self.school_class
        return f"{self.course.title} -> {target}"
