import functools
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from mediarelay.core.errors import ToolNotFoundError
from mediarelay.core.logging import bind_request_id, log_error, log_info
from mediarelay.i18n import i18n
from mediarelay.models.request import DownloadRequest
from mediarelay.models.response import ErrorResponse
from mediarelay.services.pipeline import MediaPipeline
from mediarelay.services.platforms import platform_names
from mediarelay.services.stream import StreamService
from mediarelay.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


class PipelineResponse(StreamingResponse):
    """
    Streams a MediaPipeline's output and closes the pipeline once the
    response stops, whether the body finished, the client went away or
    sending failed.
    """

    def __init__(self, pipeline: MediaPipeline, **kwargs):
        super().__init__(pipeline.stream(), **kwargs)
        self.pipeline = pipeline

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.pipeline.close()


@router.get(
    "/api/download",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@router.get("/twitter/stream", include_in_schema=False)
async def download(
    request: Request,
    url: Optional[str] = Query(None, description="Media page URL"),
    quality: Optional[str] = Query(None, description="audio, 720, 1080, 4k/2160 or best"),
):
    """Stream media from a supported platform as MP4/M4A"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)
    request_id = bind_request_id(request)

    video_request = DownloadRequest(url=url, quality=quality)
    if not video_request.url:
        raise HTTPException(status_code=400, detail={"error": _("error.missing_url")})

    intent = video_request.to_intent()
    if intent is None:
        raise HTTPException(
            status_code=400,
            detail={
                "error": _("error.unsupported_url"),
                "message": _("error.unsupported_url_message"),
                "supported": platform_names(),
            },
        )

    log_info(request, f"Relay request: {safe_url_for_log(intent.url)} ({intent.platform}, {intent.quality.value})")

    try:
        pipeline, headers = await StreamService.open(intent, request_id)
    except ToolNotFoundError as e:
        log_error(request, _("log.download_error", reason=str(e)))
        raise HTTPException(
            status_code=500,
            detail={
                "error": _("error.tool_missing"),
                "message": _("error.tool_missing_message", tool=e.tool),
            },
        )
    except Exception as e:
        log_error(request, _("log.download_error", reason=str(e)))
        raise HTTPException(
            status_code=500,
            detail={
                "error": _("error.download_failed"),
                "message": str(e) or type(e).__name__,
            },
        )

    return PipelineResponse(
        pipeline,
        media_type=intent.media.media_type,
        headers=headers,
    )
