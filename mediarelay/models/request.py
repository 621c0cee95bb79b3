from typing import Optional

from pydantic import BaseModel, Field, field_validator

from mediarelay.models.internal import DownloadIntent, Quality
from mediarelay.services.format import FormatDecision
from mediarelay.services.platforms import match_platform


class DownloadRequest(BaseModel):
    url: Optional[str] = Field(None, description="Media page URL")
    quality: Quality = Field(Quality.BEST, description="audio, 720, 1080, 4k/2160 or best")

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("quality", mode="before")
    @classmethod
    def parse_quality(cls, v):
        """Unknown quality tiers fall back to best"""
        if isinstance(v, Quality):
            return v
        return Quality.parse(v)

    def to_intent(self) -> Optional[DownloadIntent]:
        """Convert to download intent, None when no platform matches"""
        if not self.url:
            return None

        platform = match_platform(self.url)
        if platform is None:
            return None

        return DownloadIntent(
            url=self.url,
            quality=self.quality,
            platform=platform.name,
            media=FormatDecision.get_metadata(self.quality, platform.name),
        )
