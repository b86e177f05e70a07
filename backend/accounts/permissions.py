from rest_framework.permissions import BasePermission

from .models import UserProfile, get_role


class HasRole(BasePermission):
    allowed_roles = ()

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and get_role(request.user) in self.allowed_roles
        )


class IsTeacher(HasRole):
    allowed_roles = (UserProfile.Role.TEACHER, UserProfile.Role.ADMIN)


class IsStudent(HasRole):
    allowed_roles = (UserProfile.Role.STUDENT,)


class IsParent(HasRole):
    allowed_roles = (UserProfile.Role.PARENT,)
