from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException


class ToolNotFoundError(FileNotFoundError):
    """An external media tool is not installed or not on PATH."""

    def __init__(self, tool: str):
        super().__init__(f"{tool} executable not found")
        self.tool = tool


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Render HTTP errors with the relay's wire shapes.
    Dict details are sent verbatim, unknown routes get a plain-text 404.
    """
    headers = getattr(exc, "headers", None)

    if isinstance(exc.detail, dict):
        return JSONResponse(exc.detail, status_code=exc.status_code, headers=headers)

    if exc.status_code == 404:
        return PlainTextResponse("Not Found", status_code=404, headers=headers)

    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=headers)
