import asyncio
import os
from types import SimpleNamespace

import pytest

from mediarelay.api.download import PipelineResponse
from mediarelay.config.settings import config
from mediarelay.models.request import DownloadRequest
from mediarelay.services.pipeline import MediaPipeline
from mediarelay.services.stream import StreamService

ENDLESS_BODY = "while :; do echo media-chunk; done"


def make_intent(url="https://vimeo.com/123456", quality=None):
    return DownloadRequest(url=url, quality=quality).to_intent()


async def _collect(pipeline):
    return [chunk async for chunk in pipeline.stream()]


def assert_all_exited(pipeline: MediaPipeline):
    assert len(pipeline.processes) == 2
    for process in pipeline.processes:
        assert process.returncode is not None


@pytest.mark.asyncio
async def test_pipeline_relays_downloader_output(fake_tools):
    fake_tools(body="printf 'first-'; printf 'second'")

    async with MediaPipeline(make_intent()) as pipeline:
        body = b"".join([chunk async for chunk in pipeline.stream()])

    assert body == b"first-second"
    assert pipeline.finished
    assert pipeline.bytes_sent == len(body)
    assert [p.returncode for p in pipeline.processes] == [0, 0]


@pytest.mark.asyncio
async def test_close_kills_running_processes(fake_tools):
    fake_tools(body=ENDLESS_BODY)

    pipeline = MediaPipeline(make_intent())
    await pipeline.start()
    stream = pipeline.stream()
    assert await stream.__anext__()
    await stream.aclose()

    await asyncio.wait_for(pipeline.close(), timeout=5)

    assert not pipeline.finished
    assert_all_exited(pipeline)


@pytest.mark.asyncio
async def test_close_is_idempotent(fake_tools):
    fake_tools(body=ENDLESS_BODY)

    pipeline = MediaPipeline(make_intent())
    await pipeline.start()
    await asyncio.wait_for(pipeline.close(), timeout=5)
    await asyncio.wait_for(pipeline.close(), timeout=5)

    assert_all_exited(pipeline)


@pytest.mark.asyncio
async def test_transcoder_failure_kills_downloader(fake_tools):
    fake_tools(body=ENDLESS_BODY, transcoder="exit 3")

    async with MediaPipeline(make_intent()) as pipeline:
        body = b"".join(await asyncio.wait_for(_collect(pipeline), timeout=5))

    assert body == b""
    assert_all_exited(pipeline)
    assert pipeline.transcoder.returncode != 0


@pytest.mark.asyncio
async def test_stderr_is_drained_without_blocking(fake_tools):
    # More stderr than a pipe buffer holds
    noisy = "i=0; while [ $i -lt 2000 ]; do echo 'warning: noisy line padding padding padding' >&2; i=$((i+1)); done; printf 'ok'"
    fake_tools(body=noisy)

    async with MediaPipeline(make_intent()) as pipeline:
        body = await asyncio.wait_for(_collect(pipeline), timeout=10)

    assert b"".join(body) == b"ok"


def process_alive(pid: int) -> bool:
    """True while pid is running; zombies count as dead"""
    status = f"/proc/{pid}/status"
    if os.path.exists("/proc"):
        try:
            with open(status, encoding="utf-8") as f:
                for line in f:
                    if line.startswith("State:"):
                        return line.split()[1] != "Z"
        except FileNotFoundError:
            return False
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


@pytest.mark.asyncio
async def test_close_kills_processes_started_by_downloader(fake_tools, tmp_path):
    # yt-dlp runs its own ffmpeg when merging formats into stdout
    pidfile = tmp_path / "child.pid"
    fake_tools(body=f"sh -c 'echo $$ > \"{pidfile}\"; while :; do echo media-chunk; done'; wait")

    pipeline = MediaPipeline(make_intent())
    await pipeline.start()
    stream = pipeline.stream()
    assert await stream.__anext__()
    await stream.aclose()

    await asyncio.wait_for(pipeline.close(), timeout=5)

    child = int(pidfile.read_text().strip())
    for _ in range(50):
        if not process_alive(child):
            break
        await asyncio.sleep(0.05)
    assert not process_alive(child)
    assert_all_exited(pipeline)


class ChunkedStderr:
    def __init__(self, chunks):
        self.chunks = list(chunks)

    async def read(self, n):
        return self.chunks.pop(0) if self.chunks else b""


@pytest.mark.asyncio
async def test_stderr_lines_survive_read_boundaries():
    pipeline = MediaPipeline(make_intent())
    process = SimpleNamespace(stderr=ChunkedStderr([
        "ERROR: caf".encode(), b"\xc3", b"\xa9 unavailable\nWARN", b"ING: retrying\nno newline",
    ]))

    await pipeline._drain_stderr(process, "yt-dlp")

    _, lines = pipeline._stderr["yt-dlp"]
    assert list(lines) == ["ERROR: café unavailable", "WARNING: retrying", "no newline"]


@pytest.mark.asyncio
async def test_client_disconnect_terminates_both_processes(fake_tools):
    fake_tools(body=ENDLESS_BODY)

    pipeline = MediaPipeline(make_intent())
    await pipeline.start()
    response = PipelineResponse(pipeline, media_type="video/mp4")

    body_sent = asyncio.Event()
    messages = []

    async def receive():
        await body_sent.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        messages.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            body_sent.set()

    scope = {"type": "http", "asgi": {"version": "3.0", "spec_version": "2.0"}}
    await asyncio.wait_for(response(scope, receive, send), timeout=5)

    assert messages[0]["type"] == "http.response.start"
    assert body_sent.is_set()
    assert not pipeline.finished
    assert_all_exited(pipeline)


@pytest.mark.asyncio
async def test_failed_send_terminates_both_processes(fake_tools):
    fake_tools(body=ENDLESS_BODY)

    pipeline = MediaPipeline(make_intent())
    await pipeline.start()
    response = PipelineResponse(pipeline, media_type="video/mp4")

    async def receive():
        await asyncio.Event().wait()

    async def send(message):
        if message["type"] == "http.response.body":
            raise OSError("connection reset")

    scope = {"type": "http", "asgi": {"version": "3.0", "spec_version": "2.4"}}
    with pytest.raises(Exception):
        await asyncio.wait_for(response(scope, receive, send), timeout=5)

    assert_all_exited(pipeline)


@pytest.mark.asyncio
async def test_probe_title_returns_first_line(fake_tools):
    fake_tools(title="echo 'A Title'; echo 'second line'")
    assert await StreamService.probe_title("https://vimeo.com/1") == "A Title"


@pytest.mark.asyncio
async def test_probe_title_falls_back_on_empty_output(fake_tools):
    fake_tools(title="echo ''")
    assert await StreamService.probe_title("https://vimeo.com/1") == "video"


@pytest.mark.asyncio
async def test_probe_title_times_out(fake_tools, monkeypatch):
    fake_tools(title="exec sleep 5")
    monkeypatch.setattr(config.download, "title_timeout", 0.2)

    title = await asyncio.wait_for(StreamService.probe_title("https://vimeo.com/1"), timeout=3)

    assert title == "video"


@pytest.mark.asyncio
async def test_open_builds_headers_and_starts_pipeline(fake_tools):
    fake_tools(title="echo 'My Clip: part 1/2'")

    pipeline, headers = await StreamService.open(make_intent(quality="audio"))
    try:
        body = b"".join(await _collect(pipeline))
    finally:
        await pipeline.close()

    assert body == b"media-bytes"
    assert headers["Content-Disposition"].startswith('attachment; filename="My_Clip_part_12.m4a"')
    assert headers["Cache-Control"] == "no-store"
    assert headers["X-Content-Type-Options"] == "nosniff"
