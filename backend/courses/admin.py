from django.contrib import admin

from .models import Course, CourseContent, CourseAssignment


class CourseContentInline(admin.TabularInline):
    model = CourseContent
    extra = 0


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'teacher')
    inlines = [CourseContentInline]


@admin.register(CourseAssignment)
class CourseAssignmentAdmin(admin.ModelAdmin):
    list_display = ('course', 'student', 'school_class', 'assigned_at')
