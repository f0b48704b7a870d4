# univote/authentication/rbac.py

from enum import Enum
from functools import wraps

from flask_jwt_extended import current_user, verify_jwt_in_request

from univote.errors import Forbidden

# Role-based access control for voters and administrators


class UserRole(Enum):
    VOTER = "voter"
    ADMIN = "admin"


class Permission(Enum):
    VOTE = "vote"
    VIEW_ELECTIONS = "view_elections"
    VIEW_RESULTS = "view_results"
    CHANGE_PASSWORD = "change_password"
    VIEW_STATS = "view_stats"


# Role -> Permissions mapping
ROLE_PERMISSIONS = {
    UserRole.VOTER: [
        Permission.VOTE,
        Permission.VIEW_ELECTIONS,
        Permission.VIEW_RESULTS,
        Permission.CHANGE_PASSWORD,
    ],
    UserRole.ADMIN: list(Permission),
}


class RBACService:
    def has_permission(self, user_role, permission):
        if isinstance(user_role, str):
            try:
                user_role = UserRole(user_role)
            except ValueError:
                return False
        if isinstance(permission, str):
            permission = Permission(permission)
        return permission in ROLE_PERMISSIONS.get(user_role, [])

    def get_permissions(self, user_role):
        if isinstance(user_role, str):
            user_role = UserRole(user_role)
        return ROLE_PERMISSIONS.get(user_role, [])


rbac_service = RBACService()


# Decorator for required permission; also resolves the bearer token to a user
def require_permission(permission):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not rbac_service.has_permission(current_user.role, permission):
                raise Forbidden()
            return func(*args, **kwargs)
        return wrapper
    return decorator


# Decorator for required role
def require_role(role):
    role_value = role.value if isinstance(role, Enum) else str(role)

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_user.role != role_value:
                raise Forbidden()
            return func(*args, **kwargs)
        return wrapper
    return decorator


admin_required = require_role(UserRole.ADMIN)
