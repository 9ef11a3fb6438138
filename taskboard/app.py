import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from taskboard.errors import StoreError, TaskboardError


def create_app(overrides=None):
    load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"), override=False)

    app = Flask(__name__)
    app.config.from_object("taskboard.config.Config")
    if overrides:
        app.config.update(overrides)
    app.url_map.strict_slashes = False

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Core extensions
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    jwt = JWTManager(app)
    _register_jwt_callbacks(jwt)

    from taskboard.utils.db import init_app as init_db

    init_db(app)

    # Register blueprints
    from taskboard.routes.auth_routes import auth_bp
    from taskboard.routes.task_routes import tasks_bp
    from taskboard.routes.user_routes import users_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    app.register_blueprint(users_bp, url_prefix="/api/users")

    @app.get("/api/health")
    def health():
        return jsonify(status="ok", service="Taskboard API"), 200

    @app.errorhandler(TaskboardError)
    def handle_taskboard_error(exc):
        if isinstance(exc, StoreError):
            # Cause already logged by the store; never echo it to the client.
            return jsonify(message=StoreError.default_message), 500
        return jsonify(message=exc.message), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify(message=exc.name), exc.code

    @app.errorhandler(Exception)
    def server_error(exc):
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify(message="Server Error"), 500

    return app


def _register_jwt_callbacks(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify(message="Not authorized, no token"), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify(message="Not authorized, token failed"), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify(message="Not authorized, token expired"), 401
