"""Logging setup for courier command-line runs.

Libraries embedding courier configure logging themselves; the runtime only
writes to `logging.getLogger(...)` loggers under `settings.logger_name`.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

_HANDLER_MARKER = "_courier_handler"


class JSONFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=repr)


def setup_logging(
    level: str = "WARNING", fmt: str = "text", logger_name: Optional[str] = None
) -> logging.Logger:
    """Install a stream handler on the courier logger, replacing a previous one."""
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    setattr(handler, _HANDLER_MARKER, True)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return logger
