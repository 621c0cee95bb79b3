from .errors import ToolNotFoundError
from .logging import get_request_logger, setup_logging

__all__ = ["ToolNotFoundError", "get_request_logger", "setup_logging"]
