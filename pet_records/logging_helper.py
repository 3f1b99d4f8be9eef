import json
import logging
import os
import time
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import g, request

RED = "\033[91m"
YELLOW = "\033[93m"
GREEN = "\033[92m"
RESET = "\033[0m"
WHITE = "\033[97m"

API_LOGGER = "api"
REQUEST_ID_HEADER = "X-Request-Id"

status_logger = logging.getLogger("pet_records.status")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; repeated calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s.%(msecs)03d - %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def log_status(status, message, extra=""):
    status = status.lower()
    color = WHITE  # default

    if status == "error":
        color = RED
    elif status == "warning":
        color = YELLOW
    elif status == "good":
        color = GREEN

    if not extra:
        status_logger.info(f"{color}{message}{RESET}")
    else:
        status_logger.info(f"{color}{message}{extra}{RESET}")


def log_event(event: str, level: int = logging.INFO, **fields) -> None:
    """Write one JSON line to the API logger."""
    logging.getLogger(API_LOGGER).log(level, json.dumps({"event": event, **fields}))


def current_request_id() -> str | None:
    return g.get("request_id")


def setup_request_logging(app, settings) -> logging.Logger:
    """
    Wire JSON-lines request logging into a Flask app.

      - request_id correlation (X-Request-Id / X-Correlation-Id / uuid)
      - event=http_request for every response: method, path, status, duration_ms
      - X-Request-Id echoed back on every response
      - testing env writes to a rotating file so a separate pytest process
        can read the log; otherwise lines go to stderr

    Handlers are replaced on every call so the latest settings always apply.
    """
    logger = logging.getLogger(API_LOGGER)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    if settings.testing:
        log_path = (Path(os.getcwd()) / settings.log_path).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=2_000_000,
            backupCount=2,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))  # JSON lines only
    logger.addHandler(handler)

    @app.before_request
    def _start_request():
        g.request_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get("X-Correlation-Id")
            or str(uuid.uuid4())
        )
        g.started = time.perf_counter()

    @app.after_request
    def _finish_request(response):
        request_id = g.get("request_id") or str(uuid.uuid4())
        started = g.get("started")
        duration_ms = int((time.perf_counter() - started) * 1000) if started else 0

        log_event(
            "http_request",
            request_id=request_id,
            method=request.method,
            path=request.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    log_event("logger_ready", env=settings.env or "unknown")
    return logger
