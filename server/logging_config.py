"""
Logging setup for the Code Tutor API.

ENVIRONMENT=production emits one JSON object per line for log collectors;
anything else gets a readable single-line format. LOG_LEVEL sets the root
level (default INFO).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Attributes passed through `extra=` that are copied into JSON records
CONTEXT_FIELDS = ("method", "path", "status_code", "duration_ms", "repository_id")

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore", "google_genai")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(environment: str | None = None, level: str | None = None) -> None:
    environment = (environment or os.getenv("ENVIRONMENT", "development")).lower()
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Replace handlers so a reload does not duplicate output
    for handler in list(root_logger.handlers):
        if getattr(handler, "_codetutor", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler._codetutor = True
    if environment == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
