import re
import unicodedata
from urllib.parse import quote

MAX_FILENAME_LENGTH = 100
DEFAULT_BASENAME = "video"

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")

WINDOWS_RESERVED = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def sanitize_filename(
    name: str,
    max_length: int = MAX_FILENAME_LENGTH,
    ascii_only: bool = True,
    default: str = DEFAULT_BASENAME,
) -> str:
    """Sanitize a title into a filename base safe for Content-Disposition"""
    name = unicodedata.normalize("NFKC", name or "")
    name = _UNSAFE_CHARS.sub("", name)
    name = _WHITESPACE.sub("_", name)
    name = _CONTROL_CHARS.sub("", name)
    if ascii_only:
        name = _NON_ASCII.sub("_", name)
    name = name[:max_length]

    if name.upper() in WINDOWS_RESERVED:
        name = f"_{name}"

    return name or default


def content_disposition(title: str, ext: str) -> str:
    """
    Build an attachment Content-Disposition header.
    The quoted filename is ASCII-only; filename* (RFC 5987) keeps
    non-ASCII titles intact.
    """
    ascii_name = f"{sanitize_filename(title)}.{ext}"
    utf8_name = f"{sanitize_filename(title, ascii_only=False)}.{ext}"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(utf8_name, safe='')}"
