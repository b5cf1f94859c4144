"""Per-request identity helpers built on flask-jwt-extended.

The caller's identity travels in the bearer token of every request:
``sub`` is the user id and the ``role`` claim is one of customer, admin
or pharmacist.
"""
from core.imports import get_jwt_identity, get_jwt, verify_jwt_in_request, wraps
from core.errors import Forbidden

STAFF_ROLES = ("admin", "pharmacist")


def current_user_id():
    return int(get_jwt_identity())


def current_role():
    return get_jwt().get("role", "customer")


def is_staff():
    return current_role() in STAFF_ROLES


def roles_required(*roles):
    """Require a valid token whose role claim is one of ``roles``."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_role() not in roles:
                raise Forbidden("Forbidden")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
