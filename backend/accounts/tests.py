from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase

from .models import UserProfile, UserRelationship, ensure_profile, get_role

User = get_user_model()


class UserProfileTests(TestCase):
    def test_ensure_profile_creates_student_by_default(self):
        user = User.objects.create_user(username='pupil', password='password')
        profile = ensure_profile(user)
        self.assertEqual(profile.role, UserProfile.Role.STUDENT)
        self.assertEqual(profile.username, 'pupil')
        self.assertEqual(profile.display_name, 'pupil')

    def test_ensure_profile_returns_existing(self):
        user = User.objects.create_user(username='teacher', password='password')
        existing = UserProfile.objects.create(user=user, role=UserProfile.Role.TEACHER)
        self.assertEqual(ensure_profile(user), existing)
        self.assertEqual(UserProfile.objects.filter(user=user).count(), 1)

    def test_superuser_defaults_to_admin(self):
        user = User.objects.create_superuser(username='root', password='password', email='root@example.com')
        self.assertEqual(get_role(user), UserProfile.Role.ADMIN)

    def test_display_name_with_names(self):
        user = User.objects.create_user(username='named', password='password', first_name='Ada', last_name='Byron')
        self.assertEqual(ensure_profile(user).display_name, 'Ada Byron')


class UserRelationshipTests(TestCase):
    def test_relationships_start_unverified_and_are_unique(self):
        parent = User.objects.create_user(username='parent', password='password')
        student = User.objects.create_user(username='child', password='password')
        relation = UserRelationship.objects.create(parent=parent, student=student)
        self.assertFalse(relation.is_verified)
        with self.assertRaises(IntegrityError):
            UserRelationship.objects.create(parent=parent, student=student)
