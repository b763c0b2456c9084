import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from tasktracker.config import Config
from tasktracker.errors import AuthError, TaskTrackerError
from tasktracker.services.auth_gateway import AuthGateway
from tasktracker.services.task_store import TaskStore
from tasktracker.services.work_log_store import WorkLogStore
from tasktracker.utils.db import init_app as init_db


def create_app(config_object=None, db=None, auth_gateway_factory=None):
    """Build the API.

    ``config_object`` defaults to :class:`tasktracker.config.Config`.
    ``db`` (a pymongo-compatible Database) and ``auth_gateway_factory`` (a
    zero-argument callable returning an AuthGateway) default to real
    services built from config; tests pass their own.
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Core extensions
    CORS(app, resources={r"/api/*": {"origins": "*"}}, supports_credentials=True)
    JWTManager(app)

    app.config.setdefault("SESSION_COOKIE_HTTPONLY", True)
    # For local development over HTTP we keep SECURE = False; enable it in production.
    app.config.setdefault("SESSION_COOKIE_SECURE", False)

    database = init_db(app, db)
    app.extensions["task_store"] = TaskStore(database)
    app.extensions["work_log_store"] = WorkLogStore(database)

    if auth_gateway_factory is None:
        if not app.config.get("FIREBASE_API_KEY"):
            app.logger.warning("FIREBASE_API_KEY missing; sign-in calls will be rejected.")
        if not app.config.get("GOOGLE_CLIENT_ID") or not app.config.get("GOOGLE_CLIENT_SECRET"):
            app.logger.warning(
                "Google OAuth is not fully configured; GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET missing."
            )

        def auth_gateway_factory():
            return AuthGateway.from_config(app.config)

    app.extensions["auth_gateway_factory"] = auth_gateway_factory

    # Register blueprints
    from tasktracker.routes.auth_routes import auth_bp, google_bp
    from tasktracker.routes.task_routes import tasks_bp
    from tasktracker.routes.work_log_routes import work_logs_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(google_bp)
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    app.register_blueprint(work_logs_bp, url_prefix="/api/work-logs")

    @app.get("/api/health")
    def health():
        return jsonify(status="ok", service="Task Tracker API"), 200

    @app.errorhandler(TaskTrackerError)
    def handle_app_error(exc):
        if exc.status_code >= 500:
            app.logger.warning("%s: %s", type(exc).__name__, exc.message)
        body = {"error": exc.message}
        if isinstance(exc, AuthError):
            body["reason"] = exc.reason
        return jsonify(body), exc.status_code

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error="Not Found"), 404

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(error="Internal Server Error"), 500

    return app
