"""Logging setup driven by ObservabilityConfig.

Adapters and services only ever call ``logging.getLogger(__name__)`` and
pass context through ``extra``. This module decides how those records are
rendered: the plain format string from configuration, or one JSON object
per line when ``structured`` is enabled.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a log record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(
    config: Optional[ObservabilityConfig] = None,
    logger_name: str = "ndc_offers",
) -> logging.Logger:
    """Attach a configured handler to the package logger.

    Calling it again replaces the handler installed by a previous call.

    Args:
        config: Observability settings. Defaults to the global config.
        logger_name: Logger to configure.

    Returns:
        The configured logger.
    """
    config = config or get_config().observability
    logger = logging.getLogger(logger_name)
    logger.setLevel(config.level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_ndc_offers_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._ndc_offers_handler = True  # type: ignore[attr-defined]
    if config.structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    return logger
