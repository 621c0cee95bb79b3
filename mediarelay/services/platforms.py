import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Platform:
    """Supported platform descriptor"""
    name: str
    pattern: re.Pattern
    icon: str

    def matches(self, url: str) -> bool:
        return self.pattern.match(url) is not None


def _platform(name: str, pattern: str, icon: str) -> Platform:
    return Platform(name=name, pattern=re.compile(pattern, re.ASCII), icon=icon)


# First match wins
PLATFORMS: Tuple[Platform, ...] = (
    _platform(
        "Twitter/X",
        r"^https?://(www\.)?(x\.com|twitter\.com)/.+/status/\d+",
        "🐦",
    ),
    _platform(
        "Instagram",
        r"^https?://(www\.)?instagram\.com/(p|reel|tv)/[\w-]+",
        "📷",
    ),
    _platform(
        "YouTube",
        r"^https?://(www\.)?(youtube\.com/watch\?v=|youtu\.be/)[\w-]+",
        "▶️",
    ),
    _platform(
        "Reddit",
        r"^https?://(www\.)?reddit\.com/r/\w+/comments/\w+",
        "🤖",
    ),
    _platform(
        "TikTok",
        r"^https?://(www\.)?(tiktok\.com/@[\w.]+/video/\d+|vm\.tiktok\.com/\w+)",
        "🎵",
    ),
    _platform(
        "Facebook",
        r"^https?://(www\.)?(facebook\.com|fb\.watch)/(watch/?\?v=\d+|[\w.]+/videos/\d+)",
        "👤",
    ),
    _platform(
        "Vimeo",
        r"^https?://(www\.)?vimeo\.com/\d+",
        "🎬",
    ),
    _platform(
        "Twitch Clips",
        r"^https?://(www\.)?(clips\.twitch\.tv/\w+|twitch\.tv/\w+/clip/\w+)",
        "🎮",
    ),
    _platform(
        "Pinterest",
        r"^https?://(www\.)?pinterest\.(com|ca|co\.uk)/pin/\d+",
        "📌",
    ),
    _platform(
        "Dailymotion",
        r"^https?://(www\.)?dailymotion\.com/video/\w+",
        "🎥",
    ),
)


def match_platform(url: str) -> Optional[Platform]:
    """Return the first platform whose pattern matches the URL"""
    for platform in PLATFORMS:
        if platform.matches(url):
            return platform
    return None


def detect_platform(url: str) -> str:
    platform = match_platform(url)
    return platform.name if platform else UNSUPPORTED


def platform_names() -> List[str]:
    return [p.name for p in PLATFORMS]


def supported_platforms() -> List[dict]:
    """Public platform list (name + icon) for the frontend"""
    return [{"name": p.name, "icon": p.icon} for p in PLATFORMS]
