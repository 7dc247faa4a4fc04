import logging
from flask_jwt_extended import decode_token, get_jwt_identity, verify_jwt_in_request
from flask_socketio import join_room
from fitcoach.extensions import db, socketio
from fitcoach.models import User


def _identity_from_auth(auth):
    token = (auth or {}).get("token") if isinstance(auth, dict) else None
    if token:
        return decode_token(token)["sub"]
    verify_jwt_in_request()
    return get_jwt_identity()


@socketio.on("connect")
def on_connect(auth=None):
    """Put each authenticated socket in a room named after the user id."""
    try:
        identity = _identity_from_auth(auth)
    except Exception as e:
        logging.warning(f"Rejected socket connection: {e}")
        return False

    # Tokens outlive deleted accounts
    if db.session.get(User, int(identity)) is None:
        logging.warning(f"Rejected socket connection for unknown user {identity}")
        return False

    join_room(str(identity))
    logging.debug(f"Socket joined room {identity}")
