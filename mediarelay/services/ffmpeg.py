from typing import List

from mediarelay.config.settings import config


class FFmpegCommandBuilder:
    """Build ffmpeg commands"""

    @staticmethod
    def build_transcode_command(audio_only: bool) -> List[str]:
        """
        Build a stdin -> stdout transcode command.

        Audio requests become AAC in an iPod (m4a) container. Video keeps the
        video stream as-is, re-encodes audio to AAC and writes fragmented MP4
        so the output never needs a seekable sink.
        """
        cmd = [
            config.tools.ffmpeg_path,
            '-loglevel', 'error',
            '-i', 'pipe:0',
        ]

        if audio_only:
            cmd.extend([
                '-c:a', 'aac',
                '-b:a', config.download.audio_bitrate,
                '-f', 'ipod',
            ])
        else:
            cmd.extend([
                '-c:v', 'copy',
                '-c:a', 'aac',
                '-movflags', 'frag_keyframe+empty_moov',
                '-f', 'mp4',
            ])

        cmd.append('pipe:1')
        return cmd

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.tools.ffmpeg_path, '-version']
