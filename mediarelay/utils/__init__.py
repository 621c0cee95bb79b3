from .filename import content_disposition, sanitize_filename
from .locale import get_locale, safe_url_for_log

__all__ = ["content_disposition", "get_locale", "safe_url_for_log", "sanitize_filename"]
