import json
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listen port")


class ToolsConfig(BaseModel):
    ytdlp_path: str = Field(default="yt-dlp", description="Downloader executable name or path")
    ffmpeg_path: str = Field(default="ffmpeg", description="Transcoder executable name or path")


class DownloadConfig(BaseModel):
    title_timeout: float = Field(default=10.0, gt=0, description="Title probe timeout in seconds")
    chunk_size: int = Field(default=64 * 1024, ge=1024, description="Relay chunk size in bytes")
    socket_timeout: Optional[int] = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: Optional[int] = Field(default=3, ge=0, description="Number of retries for yt-dlp")
    audio_bitrate: str = Field(default="192k", description="AAC bitrate for audio-only output")
    stderr_max_lines: int = Field(default=50, ge=1, description="Stderr lines kept per process")
    exit_grace_seconds: float = Field(default=5.0, gt=0, description="Wait for clean exit after a finished stream")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="Media Relay", description="API title")
    description: str = Field(default="Stream media from supported platforms as browser-playable MP4", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class Config(BaseSettings):
    """Main configuration model"""

    model_config = SettingsConfigDict(env_prefix="MEDIARELAY_", env_nested_delimiter="__")

    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str = "config.json") -> "Config":
        """Load configuration from JSON file"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            logger.info(f"Configuration loaded from {config_path}")
            return cls(**config_data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using environment/default configuration")
        return cls()


def load_config() -> Config:
    """Load configuration with priority: config file > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    logger.debug(f"Config file not found at {CONFIG_PATH}, using environment variables")
    return Config()


config = load_config()
