import logging
import uuid
from typing import Any, MutableMapping, Tuple

from fastapi import Request
from rich.logging import RichHandler

from mediarelay.config.settings import config

logger = logging.getLogger("mediarelay")


def setup_logging() -> None:
    """Configure the package logger from config.logging (idempotent)."""
    if logger.handlers:
        return

    if config.logging.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.logging.format))

    logger.addHandler(handler)
    logger.setLevel(config.logging.level)
    logger.propagate = False


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Prefix every message with the request id."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        request_id = self.extra.get("request_id", "unknown")
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{request_id}] {msg}", kwargs


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def get_request_logger(request_id: str) -> RequestLoggerAdapter:
    return RequestLoggerAdapter(logger, {"request_id": request_id})


def bind_request_id(request: Request) -> str:
    """Attach a short id to the request for log correlation."""
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = new_request_id()
        request.state.request_id = request_id
    return request_id


def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    get_request_logger(request_id).log(level, message, extra=kwargs)


def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)


def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)