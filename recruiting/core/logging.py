import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from recruiting.core.config import Settings, get_settings

# Ids a service may attach with `extra=`; they become top-level JSON keys
CONTEXT_FIELDS = ("group_id", "candidate_id", "holiday_id")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, tagged with the environment and entity ids."""

    def __init__(self, environment: str):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "env": self.environment,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Install a single stdout handler on the `recruiting` logger.

    Text lines for local runs, JSON lines elsewhere. SQL statement logging
    stays at WARNING regardless of LOG_LEVEL.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if settings.ENVIRONMENT == "local":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))
    else:
        handler.setFormatter(JsonFormatter(settings.ENVIRONMENT))

    app_logger = logging.getLogger("recruiting")
    app_logger.handlers[:] = [handler]
    app_logger.setLevel(level)
    app_logger.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
