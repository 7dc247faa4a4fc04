from flask import Blueprint

client_bp = Blueprint('client', __name__)

from . import association_requests, trainers  # noqa: E402,F401
