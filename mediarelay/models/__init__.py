from .internal import DownloadIntent, MediaMetadata, Quality
from .response import ErrorResponse, FullHealthStatus, HealthStatus, PlatformInfo

__all__ = [
    "DownloadIntent",
    "ErrorResponse",
    "FullHealthStatus",
    "HealthStatus",
    "MediaMetadata",
    "PlatformInfo",
    "Quality",
]
