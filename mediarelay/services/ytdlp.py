import asyncio
import os
import signal
from contextlib import suppress
from typing import List, NamedTuple

from mediarelay.config.settings import config
from mediarelay.core.errors import ToolNotFoundError


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes


async def spawn(cmd: List[str], **kwargs) -> asyncio.subprocess.Process:
    """
    Start a subprocess in its own session, reporting a missing executable
    by tool name. yt-dlp starts ffmpeg itself when merging formats, so the
    whole process group has to go when we kill it.
    """
    kwargs.setdefault("start_new_session", True)
    try:
        return await asyncio.create_subprocess_exec(*cmd, **kwargs)
    except FileNotFoundError as e:
        raise ToolNotFoundError(cmd[0]) from e


def kill_process_tree(process: asyncio.subprocess.Process) -> None:
    """SIGKILL the process together with any children it started"""
    if os.name != "posix":
        if process.returncode is None:
            with suppress(ProcessLookupError):
                process.kill()
        return

    # The group outlives its leader while children remain
    with suppress(ProcessLookupError, PermissionError):
        os.killpg(process.pid, signal.SIGKILL)


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float,
        capture_stderr: bool = True
    ) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.
        Prevents process leaks and ensures consistent error handling.
        """
        process = await spawn(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr if capture_stderr else b""
            )

        except asyncio.TimeoutError:
            kill_process_tree(process)
            await process.wait()
            raise
        except BaseException:
            if process.returncode is None:
                kill_process_tree(process)
                await process.wait()
            raise


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    @staticmethod
    def _network_options() -> List[str]:
        options = []
        if config.download.socket_timeout is not None:
            options.extend(['--socket-timeout', str(config.download.socket_timeout)])
        if config.download.retries is not None:
            options.extend(['--retries', str(config.download.retries)])
        return options

    @staticmethod
    def build_title_command(url: str) -> List[str]:
        """Build command for printing the media title only"""
        return [
            config.tools.ytdlp_path,
            '--print', 'title',
            '--no-playlist',
            *YTDLPCommandBuilder._network_options(),
            url,
        ]

    @staticmethod
    def build_stream_command(url: str, format_str: str) -> List[str]:
        """Build command writing the raw media stream to stdout"""
        # NOTE: Do NOT use --print here as it mixes with binary output in stdout
        return [
            config.tools.ytdlp_path,
            '-f', format_str,
            '-o', '-',
            '--no-playlist',
            '--no-progress',
            *YTDLPCommandBuilder._network_options(),
            url,
        ]

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.tools.ytdlp_path, '--version']
