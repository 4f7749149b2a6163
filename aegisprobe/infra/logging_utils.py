import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            payload.update(getattr(record, "extra_data"))
        return json.dumps(payload, default=str)


def configure_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """JSON lines on stderr by default; stdout is reserved for report output."""
    logger = logging.getLogger("aegisprobe")
    logger.setLevel(level)
    target = stream if stream is not None else sys.stderr
    if not logger.handlers:
        handler = logging.StreamHandler(target)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    elif stream is not None:
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(stream)
    return logger


LOGGER = configure_logging()
