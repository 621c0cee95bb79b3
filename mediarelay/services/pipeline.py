import asyncio
import codecs
from collections import deque
from contextlib import suppress
from typing import AsyncIterator, Deque, List, Optional

from mediarelay.config.settings import config
from mediarelay.core.logging import get_request_logger
from mediarelay.i18n import i18n
from mediarelay.models.internal import DownloadIntent
from mediarelay.services.ffmpeg import FFmpegCommandBuilder
from mediarelay.services.ytdlp import YTDLPCommandBuilder, kill_process_tree, spawn

STDERR_READ_SIZE = 4096


class MediaPipeline:
    """
    yt-dlp -> ffmpeg process pair for a single request.

    ``start()`` spawns both processes plus three tracked tasks: the relay
    from downloader stdout to transcoder stdin, and one stderr drain per
    process. ``stream()`` yields the transcoder's stdout. ``close()`` must
    run on every exit path; it kills whatever is still alive, cancels the
    tasks and reaps both processes. The pipeline is also an async context
    manager that does exactly that.
    """

    def __init__(self, intent: DownloadIntent, request_id: str = "unknown"):
        self.intent = intent
        self.log = get_request_logger(request_id)
        self.chunk_size = config.download.chunk_size
        self.downloader: Optional[asyncio.subprocess.Process] = None
        self.transcoder: Optional[asyncio.subprocess.Process] = None
        self.bytes_sent = 0
        self._tasks: List[asyncio.Task] = []
        self._stderr: dict = {}
        self._finished = False
        self._closed = False

    @property
    def processes(self) -> List[asyncio.subprocess.Process]:
        return [p for p in (self.downloader, self.transcoder) if p is not None]

    @property
    def finished(self) -> bool:
        return self._finished

    async def __aenter__(self) -> "MediaPipeline":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        try:
            self.downloader = await spawn(
                YTDLPCommandBuilder.build_stream_command(self.intent.url, self.intent.media.format_str),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            self.transcoder = await spawn(
                FFmpegCommandBuilder.build_transcode_command(self.intent.audio_only),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except BaseException:
            await self.close()
            raise

        self._tasks = [
            asyncio.create_task(self._relay()),
            asyncio.create_task(self._drain_stderr(self.downloader, "yt-dlp")),
            asyncio.create_task(self._drain_stderr(self.transcoder, "ffmpeg")),
        ]

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield transcoder output until it is exhausted"""
        stdout = self.transcoder.stdout
        while True:
            chunk = await stdout.read(self.chunk_size)
            if not chunk:
                break
            self.bytes_sent += len(chunk)
            yield chunk
        self._finished = True

    def kill(self) -> None:
        """Hard-kill both processes and anything they spawned"""
        for process in self.processes:
            kill_process_tree(process)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            if self._finished:
                # Output is exhausted, give both processes a moment to exit on their own
                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self._wait_processes(), timeout=config.download.exit_grace_seconds)
                self.log.info(i18n.get("log.stream_finished", size=_format_size(self.bytes_sent)))
            elif self._tasks:
                self.log.info(i18n.get("log.client_disconnected"))
        finally:
            self.kill()
            for task in self._tasks:
                task.cancel()

        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._wait_processes()

        self._report_exit_codes()

    async def _wait_processes(self) -> None:
        await asyncio.gather(*(p.wait() for p in self.processes))

    async def _relay(self) -> None:
        """Copy downloader stdout into transcoder stdin, then signal EOF"""
        source = self.downloader.stdout
        sink = self.transcoder.stdin
        try:
            while True:
                chunk = await source.read(self.chunk_size)
                if not chunk:
                    break
                sink.write(chunk)
                await sink.drain()
            sink.close()
            await sink.wait_closed()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.log.error(i18n.get("log.relay_failed", reason=str(e) or type(e).__name__))
            self.kill()

    async def _drain_stderr(self, process: asyncio.subprocess.Process, tool: str) -> None:
        """Log stderr so a chatty process never blocks on a full pipe"""
        lines: Deque[str] = deque(maxlen=config.download.stderr_max_lines)
        self._stderr[tool] = (process, lines)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        while True:
            chunk = await process.stderr.read(STDERR_READ_SIZE)
            if not chunk:
                break
            # Reads can end mid-line or mid-character, keep the tail for the next one
            *complete, pending = (pending + decoder.decode(chunk)).split("\n")
            if len(pending) > STDERR_READ_SIZE:
                complete.append(pending)
                pending = ""
            for line in complete:
                self._record_stderr(tool, lines, line)
        self._record_stderr(tool, lines, pending + decoder.decode(b"", final=True))

    def _record_stderr(self, tool: str, lines: Deque[str], line: str) -> None:
        line = line.strip()
        if line:
            lines.append(line)
            self.log.warning(f"{tool}: {line}")

    def _report_exit_codes(self) -> None:
        # Killed processes are expected after a disconnect
        if not self._finished:
            return
        for tool, (process, lines) in self._stderr.items():
            if process.returncode:
                summary = " | ".join(lines)[:200]
                self.log.error(i18n.get("log.process_failed", tool=tool, code=process.returncode, summary=summary))


def _format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / 1024 / 1024:.1f} MB"
    return f"{size / 1024:.1f} KB"
