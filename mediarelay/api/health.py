import time

from fastapi import APIRouter

from mediarelay.config.settings import config
from mediarelay.core.state import state
from mediarelay.i18n import i18n
from mediarelay.models.response import FullHealthStatus, HealthStatus

router = APIRouter()


def _now_ms() -> int:
    return int(time.time() * 1000)


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("health.status"),
        "timestamp": _now_ms(),
    }


@router.get("/health/full", response_model=FullHealthStatus)
async def health_check_full():
    """Detailed health check"""
    return {
        "status": i18n.get("health.status"),
        "timestamp": _now_ms(),
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version,
        "ffmpeg_version": state.ffmpeg_version,
    }
