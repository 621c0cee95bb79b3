from typing import Optional

from mediarelay.models.internal import MediaMetadata, Quality

# Platforms whose extractors expose separate mp4/m4a streams
CONTAINER_AWARE_PLATFORMS = ("YouTube",)


class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def decide(quality: Quality, platform: Optional[str] = None) -> str:
        """Decide yt-dlp format expression for a quality tier and platform"""
        if not isinstance(quality, Quality):
            quality = Quality.parse(quality)

        if platform and any(name in platform for name in CONTAINER_AWARE_PLATFORMS):
            if quality is Quality.AUDIO:
                return "bestaudio[ext=m4a]/bestaudio"
            if quality.height:
                return (
                    f"bestvideo[height<={quality.height}][ext=mp4]+bestaudio[ext=m4a]/"
                    f"best[height<={quality.height}]"
                )
            return "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"

        if quality is Quality.AUDIO:
            return "bestaudio/best"
        if quality.height:
            return f"bv*[height<={quality.height}]+ba/b[height<={quality.height}]/b"

        # Merge best video and audio, fall back to best progressive
        return "bv*+ba/b"

    @staticmethod
    def get_metadata(quality: Quality, platform: Optional[str] = None) -> MediaMetadata:
        """Get media metadata based on quality tier"""
        if not isinstance(quality, Quality):
            quality = Quality.parse(quality)
        format_str = FormatDecision.decide(quality, platform)

        if quality is Quality.AUDIO:
            return MediaMetadata(format_str=format_str, ext="m4a", media_type="audio/mp4")

        return MediaMetadata(format_str=format_str, ext="mp4", media_type="video/mp4")
