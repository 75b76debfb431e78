"""
Logging setup shared by the proxy server and the terminal dashboard.

Usage
-----
In an entrypoint:

    from utils.logging_utils import setup_logging

    def main() -> None:
        setup_logging(level="INFO", service="weather-proxy")
        ...

In a module:

    from utils.logging_utils import get_tagged_logger

    logger = get_tagged_logger(__name__, tag="openweather_client")
    logger.info("Fetching current weather")

Every record carries a `service` and a `tag` field so proxy and dashboard
output can be told apart when both run on the same host.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


# Early records (emitted on import, before setup_logging) still get a timestamp.
BOOTSTRAP_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
BOOTSTRAP_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=BOOTSTRAP_FORMAT,
    datefmt=BOOTSTRAP_DATEFMT,
)


DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(service)s | %(tag)s | %(name)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SECRET_PARAM_TOKENS = ("appid", "key", "token", "secret", "pass")

_CONFIGURED: bool = False


class MaxLevelFilter(logging.Filter):
    """Pass only records at or below `max_level` (keeps stdout free of warnings)."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """
    Guarantee a `tag` attribute on every record.

    Records coming through a tagged LoggerAdapter already have one; plain
    loggers (uvicorn, requests, redis) fall back to the last segment of their
    logger name, e.g. "uvicorn.access" -> "access".
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            logger_name = getattr(record, "name", "")
            record.tag = logger_name.split(".")[-1] if logger_name else "-"
        return True


class ServiceNameFilter(logging.Filter):
    """Stamp every record with the process-wide service name ("-" when unset)."""

    def __init__(self, service: Optional[str] = None) -> None:
        super().__init__()
        self._service = service or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "service"):
            record.service = self._service
        return True


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    service: Optional[str] = None,
) -> Mapping[str, Any]:
    """
    Build the dictConfig mapping used by setup_logging().

    DEBUG/INFO go to stdout, WARNING and above to stderr.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "service": {"()": ServiceNameFilter, "service": service},
            "stdout_max_info": {
                "()": MaxLevelFilter,
                "max_level": logging.INFO,
            },
        },
        "formatters": {
            "standard": {
                "format": log_format,
                "datefmt": date_format,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "service", "stdout_max_info"],
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "service"],
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["stdout", "stderr"],
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    service: Optional[str] = None,
    override_existing: bool = False,
) -> None:
    """
    Configure logging once per process.

    Parameters
    ----------
    level:
        Root logger level.
    service:
        Name shown in the `%(service)s` field, e.g. "weather-proxy" or
        "weather-dashboard".
    override_existing:
        Re-apply the configuration even if it was already applied.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(
        build_logging_config(
            level=level,
            log_format=log_format,
            date_format=date_format,
            service=service,
        )
    )
    _CONFIGURED = True


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """
    Return a LoggerAdapter whose records always carry `tag`.

    When `tag` is omitted the last segment of `name` is used.
    """
    base_logger = logging.getLogger(name)
    if tag is None:
        tag = name.split(".")[-1]
    return logging.LoggerAdapter(base_logger, {"tag": tag})


def mask_secret_params(url: str, tokens: Iterable[str] = SECRET_PARAM_TOKENS) -> str:
    """Return `url` with secret-looking query parameter values replaced by ***.

    Examples
    --------
    - https://api.example.com/weather?q=Paris&appid=abc -> ...?q=Paris&appid=%2A%2A%2A
    - https://api.example.com/weather?q=Paris -> unchanged
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.query:
        return url

    lowered_tokens = tuple(t.lower() for t in tokens)
    pairs = []
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        if any(token in key.lower() for token in lowered_tokens):
            pairs.append((key, "***"))
        else:
            pairs.append((key, value))
    return urlunparse(parsed._replace(query=urlencode(pairs)))
