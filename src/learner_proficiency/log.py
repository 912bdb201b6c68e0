"""structlog configuration."""

import logging

import structlog

from learner_proficiency.config import get_settings


def configure_logging(env: str | None = None) -> None:
    """Configure structlog for the given environment.

    Args:
        env: "production" for JSON output at INFO, anything else for
            console output at DEBUG. Defaults to ``Settings.env`` (the ENV
            environment variable or settings.yaml).
    """
    if env is None:
        env = get_settings().env
    is_production = env.lower() == "production"

    if is_production:
        # Production: JSON format for machine parsing
        renderer = structlog.processors.JSONRenderer()
        level = logging.INFO
    else:
        # Development: console format for human readability
        renderer = structlog.dev.ConsoleRenderer()
        level = logging.DEBUG

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
