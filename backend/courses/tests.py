from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase

from accounts.models import SchoolClass
from .models import Course, CourseAssignment

User = get_user_model()


class CourseAssignmentTests(TestCase):
    def setUp(self):
        self.teacher = User.objects.create_user(username='teacher', password='password')
        self.student = User.objects.create_user(username='student', password='password')
        self.course = Course.objects.create(title='Chemistry', teacher=self.teacher)

    def test_assign_to_student_or_class(self):
        school_class = SchoolClass.objects.create(name='7B')
        CourseAssignment.objects.create(course=self.course, student=self.student)
        CourseAssignment.objects.create(course=self.course, school_class=school_class)
        self.assertEqual(self.course.assignments.count(), 2)

    def test_assignment_needs_exactly_one_target(self):
        with self.assertRaises(IntegrityError):
            CourseAssignment.objects.create(course=self.course)
