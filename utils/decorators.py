"""
Route decorators for authentication and authorization.
Provides role-based access control for routes.
"""

from functools import wraps
from flask import abort
from flask_login import login_required, current_user


def role_required(*roles: str):
    """
    Decorator to require one of the given roles for a route.

    Usage:
        @admin_bp.route('/dashboard')
        @login_required
        @role_required('admin')
        def dashboard():
            ...

    Args:
        roles: Accepted role names (e.g., 'admin')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated or current_user.role not in roles:
                abort(403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required']
