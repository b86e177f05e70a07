from django.contrib import admin
from .models import UserProfile, SchoolClass, UserRelationship


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role')
    search_fields = ('user__username', 'user__email')
    list_filter = ('role',)


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ('name',)
    filter_horizontal = ('students',)


@admin.register(UserRelationship)
class UserRelationshipAdmin(admin.ModelAdmin):
    list_display = ('parent', 'student', 'is_verified', 'created_at')
    list_filter = ('is_verified',)
