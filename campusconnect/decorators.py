from functools import wraps

from flask_login import current_user

from campusconnect.errors import UnauthenticatedError, UnauthorizedError


def role_required(*roles):
    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            if not current_user.is_authenticated:
                raise UnauthenticatedError("Authentication invalid")
            if current_user.role not in roles:
                raise UnauthorizedError("Unauthorized to access this route")
            return func(*args, **kwargs)

        return inner

    return wrapper


admin_required = role_required("admin")
