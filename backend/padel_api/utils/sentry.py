import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)


def _env(name: str) -> str | None:
    return (os.getenv(name) or "").strip() or None


def _sample_rate(name: str) -> float:
    """Read a ``[0, 1]`` sampling rate; anything else disables sampling."""

    raw = _env(name)
    if raw is None:
        return 0.0
    try:
        rate = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return 0.0
    if not 0.0 <= rate <= 1.0:
        logger.warning("Ignoring %s=%r: must be within [0, 1]", name, raw)
        return 0.0
    return rate


def init_sentry() -> bool:
    """Report errors to Sentry when ``SENTRY_DSN`` is set."""

    dsn = _env("SENTRY_DSN")
    if dsn is None:
        logger.info("SENTRY_DSN not provided; skipping Sentry initialization.")
        return False

    environment = _env("SENTRY_ENVIRONMENT")
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        release=_env("SENTRY_RELEASE"),
        traces_sample_rate=_sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=_sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
    )
    logger.info("Initialized Sentry (environment=%s)", environment or "default")
    return True
