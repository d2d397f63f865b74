import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _parse_positive_int(env_var: str, default: int) -> int:
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            env_var,
            raw_value,
            default,
        )
        return default

    if value < 1:
        logger.warning("%s must be positive; defaulting to %d", env_var, default)
        return default

    return value


def _load_stats_timezone() -> ZoneInfo | None:
    """Return the zone trailing stats windows are anchored in.

    ``None`` means the host's local time.
    """
    name = (os.getenv("STATS_TIMEZONE") or "").strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise RuntimeError(f"STATS_TIMEZONE {name!r} is not a known timezone")


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()

STATS_TIMEZONE = _load_stats_timezone()
STATS_CACHE_TTL_SECONDS = _parse_positive_int("STATS_CACHE_TTL_SECONDS", 300)
# Upper bound on trailing stats windows accepted by the API (about a century).
STATS_MAX_DAYS = 36500
SERIES_GAMES_LIMIT = _parse_positive_int("SERIES_GAMES_LIMIT", 5)
GAME_WRITE_RATE_LIMIT = (os.getenv("GAME_WRITE_RATE_LIMIT") or "30/minute").strip()
