import asyncio
from typing import Tuple

from mediarelay.config.settings import config
from mediarelay.core.logging import get_request_logger
from mediarelay.i18n import i18n
from mediarelay.models.internal import DownloadIntent
from mediarelay.services.pipeline import MediaPipeline
from mediarelay.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder
from mediarelay.utils.filename import DEFAULT_BASENAME, content_disposition
from mediarelay.utils.locale import safe_url_for_log


class StreamService:
    """Relay a platform URL through yt-dlp and ffmpeg"""

    @staticmethod
    async def probe_title(url: str, request_id: str = "unknown") -> str:
        """
        Best-effort title lookup with a bounded timeout.
        Any failure falls back to the default base name.
        """
        log = get_request_logger(request_id)
        cmd = YTDLPCommandBuilder.build_title_command(url)

        try:
            result = await SubprocessExecutor.run(cmd, timeout=config.download.title_timeout)
        except asyncio.TimeoutError:
            reason = f"timed out after {config.download.title_timeout:g}s"
        except OSError as e:
            reason = str(e)
        else:
            lines = result.stdout.decode(errors="replace").strip().splitlines()
            if result.returncode == 0 and lines and lines[0].strip():
                return lines[0].strip()
            reason = f"exit code {result.returncode}"

        log.warning(i18n.get("log.title_fallback", url=safe_url_for_log(url), reason=reason))
        return DEFAULT_BASENAME

    @staticmethod
    async def open(intent: DownloadIntent, request_id: str = "unknown") -> Tuple[MediaPipeline, dict]:
        """
        Probe the title, start the process pipeline and build response headers.
        Returns (pipeline, headers); the caller owns closing the pipeline.
        """
        log = get_request_logger(request_id)

        title = await StreamService.probe_title(intent.url, request_id)
        log.info(i18n.get(
            "log.downloading",
            platform=intent.platform,
            title=title,
            quality=intent.quality.value,
        ))

        pipeline = MediaPipeline(intent, request_id)
        await pipeline.start()

        headers = {
            'Content-Disposition': content_disposition(title, intent.media.ext),
            'Cache-Control': 'no-store',
            'X-Content-Type-Options': 'nosniff',
        }

        return pipeline, headers
