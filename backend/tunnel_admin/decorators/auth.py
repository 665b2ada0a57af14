from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from tunnel_admin.services.policy import has_permissions


def require_permissions(*codes: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not has_permissions(*codes):
                abort(403, description=f"Missing permission: {', '.join(codes)}")
            return fn(*args, **kwargs)
        return wrapper
    return outer
