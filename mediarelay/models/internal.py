from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Quality(str, Enum):
    """Requested quality tier"""
    AUDIO = "audio"
    P720 = "720"
    P1080 = "1080"
    P2160 = "2160"
    BEST = "best"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Quality":
        """Parse a query value; unknown or missing tiers mean best."""
        if not value:
            return cls.BEST
        value = value.strip().lower()
        if value == "4k":
            return cls.P2160
        try:
            return cls(value)
        except ValueError:
            return cls.BEST

    @property
    def height(self) -> Optional[int]:
        if self in (Quality.P720, Quality.P1080, Quality.P2160):
            return int(self.value)
        return None

    @property
    def audio_only(self) -> bool:
        return self is Quality.AUDIO


class MediaMetadata(BaseModel):
    """Media metadata"""
    format_str: str
    ext: str
    media_type: str


class DownloadIntent(BaseModel):
    """Internal download intent (separated from HTTP concerns)"""
    url: str
    quality: Quality
    platform: str
    media: MediaMetadata

    @property
    def audio_only(self) -> bool:
        return self.quality.audio_only
