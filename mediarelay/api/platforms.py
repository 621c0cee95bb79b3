from typing import List

from fastapi import APIRouter

from mediarelay.models.response import PlatformInfo
from mediarelay.services.platforms import supported_platforms

router = APIRouter()


@router.get("/api/platforms", response_model=List[PlatformInfo])
async def list_platforms():
    """Supported platforms for the frontend"""
    return supported_platforms()
