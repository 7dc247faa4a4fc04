from flask import Blueprint

trainer_bp = Blueprint('trainer', __name__)

from . import association_requests, clients  # noqa: E402,F401
