import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "ingredient-extractor"

# Fields every record may carry; missing ones are rendered as null.
LOG_FIELDS = (
    "asctime", "levelname", "name", "message",
    "request_id", "method", "path", "target_host", "status_code", "duration_ms",
)


def setup_logging(level: str = "INFO") -> None:
    """Send every log line, uvicorn's included, to stdout as one JSON object."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(
        " ".join(f"%({name})s" for name in LOG_FIELDS),
        static_fields={"service": SERVICE_NAME},
    ))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.propagate = False
