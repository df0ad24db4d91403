import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, API_VERSION
from .errors import register_error_handlers
from models import storage
from services.token_authority import TokenAuthority, TokenSettings
from services.user_store import SQLUserStore


# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Q&A Forum API",
        "version": API_VERSION,
        "description": "REST API for registering users, managing sessions and asking tagged questions.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, config_overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    ``config_overrides`` is applied on top of the selected config class
    (tests use it for secrets and a throwaway database).
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("services").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Fails fast when a token secret is missing or both secrets are equal
    try:
        settings = TokenSettings.from_config(app.config)
    except ValueError as exc:
        raise RuntimeError(f"Invalid token configuration: {exc}") from exc

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    user_store = SQLUserStore(storage)
    app.extensions["user_store"] = user_store
    app.extensions["token_authority"] = TokenAuthority(user_store, settings)

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .questions import bp as questions_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(questions_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to the Q&A Forum API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
