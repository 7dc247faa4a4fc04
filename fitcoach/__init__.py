import logging
import os

from flask import Flask, jsonify
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from fitcoach.config import config
from fitcoach.errors import FitcoachError
from fitcoach.extensions import db, ma, jwt, migrate, cors, socketio


def register_error_handlers(app):
    @app.errorhandler(FitcoachError)
    def handle_fitcoach_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(error):
        return jsonify({"msg": "Invalid input", "error": "validation_error", "errors": error.messages}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"msg": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logging.exception(f"Unhandled error: {error}")
        return jsonify({"msg": "Internal server error"}), 500


def create_app(config_name=None):
    app = Flask(__name__)
    config_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/*": {
        "origins": app.config["CORS_ORIGINS"],
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    }}, supports_credentials=True)
    # Handlers are collected before init_app so every new server gets them
    from fitcoach import sockets  # noqa: F401
    socketio.init_app(app, async_mode=app.config["SOCKETIO_ASYNC_MODE"])

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"msg": "Token expired. Please log in again."}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"msg": "Invalid token. Please log in again."}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(error):
        return jsonify({"msg": "Missing authorization"}), 401

    register_error_handlers(app)

    from fitcoach import models  # noqa: F401

    from fitcoach.routes.auth import auth_bp
    from fitcoach.routes.client import client_bp
    from fitcoach.routes.trainer import trainer_bp
    from fitcoach.routes.admin import admin_bp
    from fitcoach.routes.notifications import notifications_bp
    from fitcoach.routes.messages import messages_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(client_bp, url_prefix="/client")
    app.register_blueprint(trainer_bp, url_prefix="/trainer")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(notifications_bp, url_prefix="/notifications")
    app.register_blueprint(messages_bp, url_prefix="/messages")

    return app
