"""Structured logging setup.

Every record carries timestamp, level, logger name and message. Extra fields
passed through ``extra=`` (entity ids, periods, document numbers) are copied
into the JSON payload when present.
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "entity",
    "entity_id",
    "period",
    "document_number",
    "invoice_number",
    "project_id",
    "path",
    "status_code",
)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            value = record.__dict__.get(key)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _AppHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces our own handler only."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging for the application."""

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, _AppHandler):
            root.removeHandler(existing)

    handler = _AppHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
