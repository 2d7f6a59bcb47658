"""
Role-based access control decorators

Use after @login_required; the decorated view runs only when the current
user holds one of the allowed roles.
"""

from functools import wraps
from flask_login import current_user
from loan_inventory.buisness.core.errors import ForbiddenError, UnauthorizedError
from loan_inventory.data.core.constants import Role
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.routes.rbac")


def role_required(*roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise UnauthorizedError()
            if current_user.role not in roles:
                logger.warning(f"User {current_user.id} ({current_user.role}) denied access to {f.__name__}")
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required(Role.ADMIN)
manager_required = role_required(Role.ADMIN, Role.GESTIONNAIRE)
