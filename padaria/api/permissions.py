"""
Role-based permissions.
"""

from rest_framework.permissions import BasePermission

from padaria.models import Role


class HasRole(BasePermission):
    """
    Allow only authenticated users whose role is in ``roles``.

    Usage:
        def get_permissions(self):
            return [IsAuthenticated(), HasRole(Role.ADMIN, Role.PRODUCAO)]
    """

    message = "Perfil sem permissão para esta operação."

    def __init__(self, *roles: Role):
        self.roles = roles

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "role", None) in self.roles
