import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def _sample_rate(env_var: str) -> float:
    """Read a sample rate in ``[0, 1]``; anything else disables sampling."""

    raw_value = (os.getenv(env_var) or "").strip()
    if not raw_value:
        return 0.0
    try:
        value = float(raw_value)
    except ValueError:
        logger.warning("%s is not a number (got %r); sampling disabled", env_var, raw_value)
        return 0.0
    if not 0.0 <= value <= 1.0:
        logger.warning("%s must be between 0 and 1 (got %s); sampling disabled", env_var, value)
        return 0.0
    return value


def init_sentry() -> bool:
    """Report errors to Sentry when ``SENTRY_DSN`` is set; return whether it is on.

    ERROR log records (storage outages, unhandled exceptions) become Sentry
    events; INFO and above are kept as breadcrumbs.
    """

    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn:
        logger.info("SENTRY_DSN not set; error reporting disabled")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=(os.getenv("SENTRY_RELEASE") or "").strip() or None,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=_sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=_sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
    )
    logger.info("Sentry error reporting enabled (environment=%s)", environment or "default")
    return True
