import stat
import sys

import pytest

from mediarelay.config.settings import config

DOWNLOADER_TEMPLATE = """#!/bin/sh
for arg in "$@"; do
  if [ "$arg" = "--print" ]; then
    {title}
    exit 0
  fi
done
{body}
"""

def write_script(path, content):
    path.write_text(content, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_tools(tmp_path, monkeypatch):
    """
    Install shell-script stand-ins for yt-dlp and ffmpeg.
    The downloader prints ``title`` for --print and runs ``body`` otherwise;
    the transcoder runs ``transcoder`` (``cat`` by default).
    """
    if sys.platform == "win32":
        pytest.skip("fake tools are POSIX shell scripts")

    def install(title="echo 'Fake Title'", body="printf 'media-bytes'", transcoder="exec cat"):
        ytdlp = write_script(tmp_path / "yt-dlp", DOWNLOADER_TEMPLATE.format(title=title, body=body))
        ffmpeg = write_script(tmp_path / "ffmpeg", f"#!/bin/sh\n{transcoder}\n")
        monkeypatch.setattr(config.tools, "ytdlp_path", str(ytdlp))
        monkeypatch.setattr(config.tools, "ffmpeg_path", str(ffmpeg))
        return ytdlp, ffmpeg

    return install
