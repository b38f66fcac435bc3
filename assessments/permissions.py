from rest_framework import permissions


class IsExaminerOrAdmin(permissions.BasePermission):
    """Staff and examiner-role users; candidates are refused."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, 'is_examiner', False)
