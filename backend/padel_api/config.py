import os


def _canon_prefix(val):
    """Normalize the API prefix to ``/segment`` form; blank or ``/`` means ``/api``."""

    prefix = "/" + (val or "").strip().strip("/")
    return prefix if prefix != "/" else "/api"


def _float_env(name: str, default: float) -> float:
    """Positive float from ``name``; unset, malformed or non-positive gives ``default``."""

    raw = (os.getenv(name) or "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# Seconds between sweeps of idle rate limit keys.
RATE_LIMIT_SWEEP_SECONDS = _float_env("RATE_LIMIT_SWEEP_SECONDS", 5 * 60.0)

# Set to "true" to let every mutation through (load tests, local seeding).
RATE_LIMITS_DISABLED = (os.getenv("DISABLE_RATE_LIMITS") or "").lower() == "true"

GROUP_STREAKS_CACHE_TTL = _float_env("GROUP_STREAKS_CACHE_TTL", 300.0)


def rate_limit_override(limit_type: str) -> str | None:
    """Return the ``RATE_LIMIT_<TYPE>`` override (e.g. ``"20/minute"``) if set."""

    raw = os.getenv(f"RATE_LIMIT_{limit_type.upper()}")
    return raw.strip() if raw and raw.strip() else None


def load_cors_settings() -> tuple[list[str], bool]:
    """Return ``(ALLOWED_ORIGINS, ALLOW_CREDENTIALS)``.

    Raises:
        ValueError: If no origin is configured or ``*`` is among them.
    """

    origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    if not origins:
        raise ValueError(
            "ALLOWED_ORIGINS environment variable must be set to a comma-separated "
            "list of trusted origins."
        )
    if "*" in origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot include '*' (wildcard). Specify explicit, trusted origins."
        )
    allow_credentials = os.getenv("ALLOW_CREDENTIALS", "true").lower() == "true"
    return origins, allow_credentials
