import uuid
from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity

from ..exceptions import ForbiddenError


def current_user_id():
    identity = get_jwt_identity()
    return uuid.UUID(str(identity)) if identity else None


def current_role():
    return get_jwt().get('role')


def roles_required(*roles):
    """Reject the request with 403 unless the token's role is one of `roles`. Use under @jwt_required()."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if current_role() not in roles:
                raise ForbiddenError('Unauthorized action')
            return fn(*args, **kwargs)
        return wrapper
    return decorator
