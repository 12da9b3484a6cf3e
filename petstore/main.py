import logging
import os

from dotenv import load_dotenv
from flask import Flask

if not os.getenv("DATABASE_URL"):
    load_dotenv()

from petstore.core import config  # noqa: E402

logger = logging.getLogger(__name__)


def _init_sentry(env: str) -> None:
    sentry_dsn = config.get_sentry_dsn()
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
        integrations=[
            FlaskIntegration(),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info(
        "Sentry initialized",
        extra={"context": {"environment": env, "traces_sample_rate": 0.1}},
    )


def _init_metrics(app: Flask, env: str) -> None:
    from prometheus_client import CollectorRegistry
    from prometheus_flask_exporter import PrometheusMetrics

    # One registry per app under TESTING; the global one rejects re-registration.
    registry = CollectorRegistry() if app.config.get("TESTING") else None
    metrics = PrometheusMetrics(app, registry=registry)
    try:
        metrics.info(
            "app_info",
            "Application information",
            version=os.getenv("GIT_SHA", "unknown"),
            environment=env,
        )
    except ValueError as e:
        logger.debug(
            "app_info metric already registered",
            extra={"context": {"error": str(e)}},
        )
    logger.info(
        "Prometheus metrics initialized",
        extra={"context": {"metrics_endpoint": "/metrics"}},
    )


def _init_limiter(app: Flask) -> None:
    from petstore.core.limiter_config import limiter

    enabled = config.get_rate_limit_enabled() and not app.config.get("TESTING")
    app.config["RATELIMIT_ENABLED"] = enabled
    app.config["RATELIMIT_STORAGE_URI"] = config.get_limiter_storage_uri()
    limiter.init_app(app)
    limiter.enabled = enabled
    logger.info(
        "Rate limiter configured",
        extra={"context": {"enabled": enabled}},
    )


def create_app(session_factory=None) -> Flask:
    """
    Build the Flask application.

    Args:
        session_factory: zero-argument callable returning a SQLAlchemy Session.
            Defaults to the engine configured from DATABASE_URL, in which case
            the tables are created on start-up.
    """
    env = config.get_environment()

    app = Flask(__name__)
    if config.is_testing():
        app.config["TESTING"] = True

    from petstore.core.logging_config import setup_logging

    setup_logging(
        app=app,
        log_level=config.get_log_level(),
        enable_sql_echo=config.get_sql_echo(),
        log_to_file=config.get_log_to_file(),
        use_json_format=config.get_log_json(),
    )
    config.log_startup_config()

    _init_sentry(env)
    _init_metrics(app, env)
    _init_limiter(app)

    from petstore.db.session import SessionLocal, create_tables
    from petstore.repositories.unit_of_work import sqlalchemy_uow_factory

    if session_factory is None:
        create_tables()
        session_factory = SessionLocal
    app.config["SESSION_FACTORY"] = session_factory
    app.config["UOW_FACTORY"] = sqlalchemy_uow_factory(session_factory)

    from petstore.core.api_utils import register_error_handlers

    register_error_handlers(app)

    from petstore.controllers.customer_controller import customers_bp
    from petstore.controllers.health_controller import health_bp
    from petstore.controllers.order_controller import orders_bp
    from petstore.controllers.pet_controller import catalog_bp, pets_bp

    app.register_blueprint(pets_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(health_bp)

    logger.info(
        "Application created",
        extra={"context": {"environment": env, "blueprints": list(app.blueprints)}},
    )
    return app
