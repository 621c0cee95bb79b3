import os

from fastapi import APIRouter
from fastapi.responses import FileResponse

router = APIRouter()

STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "static")
INDEX_PATH = os.path.join(STATIC_DIR, "index.html")


@router.get("/", include_in_schema=False)
async def index():
    return FileResponse(
        INDEX_PATH,
        media_type="text/html",
        headers={"Cache-Control": "public, max-age=300"},
    )
