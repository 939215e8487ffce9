import logging
from typing import Iterable

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# klienci zewnętrznych serwisów – osobny poziom (EXTERNAL_LOG_LEVEL)
EXTERNAL_LOGGERS = ("integration", "urllib3")


def _level(name: str, fallback: int = logging.INFO) -> int:
    return getattr(logging, (name or "").upper(), fallback)


def _set_levels(names: Iterable[str], level: int) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def configure_logging(app: Flask) -> None:
    """Logowanie aplikacji + ciszej dla klientów HTTP."""
    app_level = _level(app.config.get("LOG_LEVEL", "INFO"))
    external_level = _level(app.config.get("EXTERNAL_LOG_LEVEL", "WARNING"), logging.WARNING)

    logging.basicConfig(level=app_level, format=LOG_FORMAT)
    _set_levels(EXTERNAL_LOGGERS, external_level)

    app.logger.setLevel(app_level)
    app.logger.info(
        "Logging configured, level=%s, external=%s, rate oracle=%s",
        logging.getLevelName(app_level),
        logging.getLevelName(external_level),
        app.config.get("RATE_ORACLE_URL"),
    )
