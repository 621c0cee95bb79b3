import asyncio
from typing import List

from rich.console import Console

from mediarelay.core.state import state
from mediarelay.i18n import i18n
from mediarelay.services.ffmpeg import FFmpegCommandBuilder
from mediarelay.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder

VERSION_TIMEOUT = 10.0

console = Console()


async def _first_line(cmd: List[str]) -> str:
    result = await SubprocessExecutor.run(cmd, timeout=VERSION_TIMEOUT, capture_stderr=False)
    if result.returncode != 0:
        raise RuntimeError(f"exit code {result.returncode}")
    output = result.stdout.decode(errors="replace").strip()
    return output.splitlines()[0] if output else "unknown"


async def detect_tool(name: str, cmd: List[str]) -> str:
    """Return the tool's version line, or a marker when it cannot run"""
    try:
        version = await _first_line(cmd)
    except (OSError, RuntimeError, asyncio.TimeoutError) as e:
        console.print(f"[yellow]⚠ {name} unavailable: {str(e) or type(e).__name__}[/yellow]")
        return i18n.get("health.tool_missing")

    console.print(f"[green]✓ {name}[/green] [dim]{version}[/dim]")
    return version


async def detect_tools() -> None:
    """Probe yt-dlp and ffmpeg once at startup"""
    state.ytdlp_version, state.ffmpeg_version = await asyncio.gather(
        detect_tool("yt-dlp", YTDLPCommandBuilder.build_version_command()),
        detect_tool("ffmpeg", FFmpegCommandBuilder.build_version_command()),
    )
