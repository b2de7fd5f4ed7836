"""
Process-wide logging for chapter runs.
The level comes from settings and can be overridden per invocation by the CLI.
"""

from __future__ import annotations

import logging

from apm.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# libraries that log plot and tracking internals at INFO or DEBUG
NOISY_LOGGERS = ("matplotlib", "PIL", "mlflow", "urllib3", "alembic")

_LOGGING_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once; later calls are no-ops."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level_value = logging.getLevelName(level.upper()) if level else get_settings().log_level
    if not isinstance(level_value, int):
        raise ValueError(f"unknown log level: {level}")

    logging.basicConfig(level=level_value, format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_value, logging.WARNING))
    _LOGGING_CONFIGURED = True
