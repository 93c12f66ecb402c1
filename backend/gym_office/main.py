import logging
import os

from dotenv import load_dotenv
from flask import Flask
from flask_login import LoginManager

from gym_office.core import config
from gym_office.core.api_utils import api_response, get_session_factory
from gym_office.core.logging_config import setup_logging

logger = logging.getLogger(__name__)

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()


def _init_sentry(env: str) -> None:
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info(
            "Sentry not initialized (SENTRY_DSN not set)",
            extra={"context": {"environment": env}},
        )
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=os.getenv("GIT_SHA", "unknown"),
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("Sentry initialized", extra={"context": {"environment": env}})


def _init_metrics(app: Flask, env: str) -> None:
    from prometheus_client import CollectorRegistry
    from prometheus_flask_exporter import PrometheusMetrics

    # One registry per app instance
    metrics = PrometheusMetrics(app, registry=CollectorRegistry())
    metrics.info(
        "app_info",
        "Application information",
        version=os.getenv("GIT_SHA", "unknown"),
        environment=env,
    )
    logger.info(
        "Prometheus metrics initialized",
        extra={"context": {"metrics_endpoint": "/metrics"}},
    )


def _init_login_manager(app: Flask) -> LoginManager:
    from gym_office.core.security import get_user_id_from_token
    from gym_office.db.base import User

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        return api_response(False, "Authentication required", None, 401)

    @login_manager.request_loader
    def load_user_from_request(request):
        """Load user from an ``Authorization: Bearer <jwt>`` header."""
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        user_id = get_user_id_from_token(auth_header.split(" ", 1)[1].strip())
        if user_id is None:
            return None

        with get_session_factory()() as db:
            user = db.get(User, user_id)
            if user and user.is_active:
                return user

        return None

    return login_manager


def create_app(config_overrides=None) -> Flask:
    """Application factory.

    Args:
        config_overrides: Flask config values applied before extensions are
            bound (tests pass TESTING, SESSION_FACTORY, METRICS_ENABLED...).
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    app.config["RATE_LIMIT_ENABLED"] = config.get_rate_limit_enabled()
    app.config["METRICS_ENABLED"] = config.get_metrics_enabled()
    app.config["LOG_TO_FILE"] = config.get_log_to_file()
    if config_overrides:
        app.config.update(config_overrides)

    env = os.getenv("FLASK_ENV", "development")
    is_production = config.is_production()

    setup_logging(
        app,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        enable_sql_echo=os.getenv("SQL_ECHO", "0") == "1",
        log_to_file=app.config["LOG_TO_FILE"],
        use_json_format=is_production,
    )
    config.log_billing_config()
    config.log_rental_policy_config()

    if is_production:
        weak_secrets = ["dev-secret-change-me", "dev-jwt-secret-change-me", "secret123"]
        secret_key = app.config["SECRET_KEY"]
        if secret_key in weak_secrets or len(secret_key) < 32:
            raise ValueError(
                "Production deployment requires strong SECRET_KEY (min 32 chars). "
                "Set FLASK_SECRET_KEY environment variable."
            )
        from gym_office.core.security import get_jwt_secret_key

        # JWT_SECRET_KEY is validated at startup in production
        get_jwt_secret_key()

    _init_sentry(env)
    if app.config["METRICS_ENABLED"]:
        _init_metrics(app, env)

    from gym_office.core.limiter_config import limiter

    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", "memory://")
    limiter.init_app(app)
    limiter.enabled = bool(app.config["RATE_LIMIT_ENABLED"])
    if not limiter.enabled:
        logger.info("Rate limiting disabled", extra={"context": {"environment": env}})

    if is_production:
        from flask_talisman import Talisman

        # JSON only: every resource type is denied
        Talisman(
            app,
            content_security_policy={"default-src": ["'none'"]},
            force_https=True,
            strict_transport_security=True,
            strict_transport_security_max_age=63072000,
            frame_options="DENY",
            referrer_policy="no-referrer",
        )

    _init_login_manager(app)

    from gym_office.controllers.billing_invoice_controller import billing_invoices_bp
    from gym_office.controllers.error_handlers import register_error_handlers
    from gym_office.controllers.health_controller import health_bp
    from gym_office.controllers.rental_request_controller import rental_requests_bp

    app.register_blueprint(rental_requests_bp)
    app.register_blueprint(billing_invoices_bp)
    app.register_blueprint(health_bp)
    register_error_handlers(app)

    if not app.config.get("SESSION_FACTORY"):
        from gym_office.db.session import create_tables

        create_tables()

    logger.info(
        "Application created",
        extra={"context": {"environment": env, "blueprints": list(app.blueprints)}},
    )
    return app
