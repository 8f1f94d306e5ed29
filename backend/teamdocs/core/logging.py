from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

LogFormat = Literal["json", "text"]

# Structured fields services attach through ``extra=``.
CONTEXT_FIELDS = (
    "request_id",
    "path",
    "method",
    "status_code",
    "latency_ms",
    "member_id",
    "assignment_id",
)


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if getattr(record, key, None) is not None}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``LEVEL logger: message key=value ...`` for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        fields = " ".join(f"{key}={value}" for key, value in _context(record).items())
        line = f"{record.levelname} {record.name}: {record.getMessage()}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", stream=None, fmt: LogFormat = "json") -> None:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(TextFormatter() if fmt == "text" else JsonFormatter())
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and echo ``X-Request-Id`` back to the caller.

    Server errors log at ERROR and rejected requests (4xx) at WARNING, so a
    production level of WARNING still shows failed writes from the client.
    """

    def __init__(self, app, logger_name: str = "request") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "path": request.url.path, "method": request.method}
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            self.logger.exception("unhandled_exception", extra={**context, "latency_ms": latency_ms})
            raise

        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.logger.log(
            level,
            "request",
            extra={**context, "status_code": response.status_code, "latency_ms": latency_ms},
        )

        response.headers["X-Request-Id"] = request_id
        return response
