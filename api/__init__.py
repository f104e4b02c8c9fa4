import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, AuthSettings
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Budget API",
        "version": "1.0.0",
        "description": "REST API for user accounts, monthly budgets, categories and category budgets.",
    },
    "basePath": "/",
    "schemes": ["http"],
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


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Token settings are validated here, so a missing secret stops startup
    instead of producing unusable tokens later.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = AuthSettings.from_config(app.config)

    storage.init_engine(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()

    from models.credential_store import CredentialStore
    from services.mailer import LogMailer
    from services.session_manager import SessionManager
    from utils.tokens import TokenCodec

    codec = TokenCodec(settings)
    app.extensions["auth_settings"] = settings
    app.extensions["token_codec"] = codec
    app.extensions["mailer"] = LogMailer()
    app.extensions["session_manager"] = SessionManager(
        CredentialStore(storage, email_case_insensitive=settings.email_case_insensitive),
        codec,
        mailer=app.extensions["mailer"],
    )

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .budgets import bp as budgets_bp
    from .categories import bp as categories_bp
    from .category_budgets import bp as category_budgets_bp

    # Auth paths are a contract with existing clients: no prefix
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(budgets_bp, url_prefix="/api")
    app.register_blueprint(categories_bp, url_prefix="/api")
    app.register_blueprint(category_budgets_bp, url_prefix="/api")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Budget API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    app.logger.debug("Application created (env=%s)", app.config.get("APP_ENV"))
    return app
