from typing import List, Optional

from pydantic import BaseModel


class PlatformInfo(BaseModel):
    """Supported platform entry"""
    name: str
    icon: str


class HealthStatus(BaseModel):
    """Liveness payload"""
    status: str
    timestamp: int


class FullHealthStatus(HealthStatus):
    """Detailed health payload"""
    version: str
    ytdlp_version: str
    ffmpeg_version: str


class ErrorResponse(BaseModel):
    """Error body for 4xx/5xx JSON responses"""
    error: str
    message: Optional[str] = None
    supported: Optional[List[str]] = None
