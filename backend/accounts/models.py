from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import models


class UserProfile(models.Model):
    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Administrator'
        TEACHER = 'TEACHER', 'Teacher'
        STUDENT = 'STUDENT', 'Student'
        PARENT = 'PARENT', 'Parent'

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.role})"

    @property
    def username(self) -> str:
        return self.user.get_username()

    @property
    def display_name(self) -> str:
        first_name = self.user.first_name or ''
        last_name = self.user.last_name or ''
        name = f"{first_name} {last_name}".strip()
        return name or self.username


class SchoolClass(models.Model):
    name = models.CharField(max_length=255)
    students = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name='school_classes', blank=True)

    class Meta:
        verbose_name_plural = 'school classes'

    def __str__(self) -> str:
        return self.name


class UserRelationship(models.Model):
    parent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='child_relations')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='parent_relations')
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['parent', 'student'], name='unique_parent_student_relation')
        ]

    def __str__(self) -> str:
        state = 'verified' if self.is_verified else 'pending'
        return f"{self.parent} -> {self.student} ({state})"


User = get_user_model()


def ensure_profile(user: User) -> UserProfile:
    defaults = {'role': UserProfile.Role.ADMIN} if user.is_superuser else {}
    profile, _ = UserProfile.objects.get_or_create(user=user, defaults=defaults)
    return profile


def get_role(user) -> str | None:
    if not user or not user.is_authenticated:
        return None
    return ensure_profile(user).role
