# catalog_app/utils/permissions.py

from catalog_app.models import UserRole


def has_role(user, role_name):
    """Check if an authenticated, active user holds ``role_name``"""
    if not user or not user.is_authenticated:
        return False
    if not getattr(user, "is_active", False):
        return False
    role = getattr(user, "role", None)
    if role is None:
        return False
    value = role.value if isinstance(role, UserRole) else str(role)
    return value == str(role_name)


def can_manage_imports(user):
    """Only admins may upload or run imports"""
    return has_role(user, UserRole.ADMIN.value)

