# fitcoach/utils/decorators.py
from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required
from fitcoach.extensions import db
from fitcoach.models.user import User, Role


def role_required(*roles):
    """
    Require a valid JWT and, when roles are given, one of those roles.
    The authenticated user is passed to the view as ``current_user``.
    """
    allowed = {Role(role).value for role in roles}

    def decorator(view_func):
        @wraps(view_func)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user = db.session.get(User, int(get_jwt_identity()))
            if not user:
                return jsonify({"msg": "Unauthorized"}), 401
            if allowed and user.role not in allowed:
                return jsonify({"msg": f"Forbidden: requires role {' or '.join(sorted(allowed))}"}), 403

            kwargs['current_user'] = user
            return view_func(*args, **kwargs)
        return wrapper
    return decorator
