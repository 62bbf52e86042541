"""Structured Logging: JSON log lines carrying reward identifiers.

Invariants:
    - Every line has timestamp, level, logger and message
    - Reward context passed through `extra=` (user_id, task_id, inviter_id, delta,
      balance, new_status, credited, error_code, path) is copied when present
    - setup_logging is idempotent: calling it twice does not duplicate output

Design Decisions:
    - stdlib logging with a small JSON formatter; `log_format=text` for local runs
    - SQLAlchemy engine logging stays at WARNING unless LOG_LEVEL is DEBUG
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "user_id", "task_id", "inviter_id", "delta", "balance",
    "new_status", "credited", "error_code", "path",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _context(record: logging.LogRecord) -> dict:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if root.level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
