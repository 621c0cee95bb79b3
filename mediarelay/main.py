from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediarelay.api import download, health, pages, platforms
from mediarelay.config.settings import config
from mediarelay.core.errors import http_exception_handler
from mediarelay.core.logging import setup_logging
from mediarelay.services.tools import detect_tools

setup_logging()

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# Routes
app.include_router(pages.router, tags=["Pages"])
app.include_router(platforms.router, tags=["Platforms"])
app.include_router(download.router, tags=["Download"])
app.include_router(health.router, tags=["Health"])


@app.on_event("startup")
async def startup_event():
    await detect_tools()
