"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use AQAPREZ_ prefix (e.g., AQAPREZ_SCALE_POLICY=reject).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use AQAPREZ_ prefix.

    Examples:
        AQAPREZ_SCALE_POLICY=reject
        AQAPREZ_SCALE_MAX=400
        AQAPREZ_WATCH_POLL_INTERVAL=1.0
    """

    model_config = SettingsConfigDict(
        env_prefix="AQAPREZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Parser configuration
    scale_policy: Literal["clamp", "reject"] = Field(
        default="clamp",
        description="What to do with an image scale outside [scale_min, scale_max]",
    )

    scale_min: float = Field(
        default=1.0,
        description="Smallest accepted image scale percentage",
    )

    scale_max: float = Field(
        default=1000.0,
        description="Largest accepted image scale percentage",
    )

    default_title: str = Field(
        default="Presentation",
        description="Title used when none is given and none can be derived from the path",
    )

    # Reload configuration
    watch_poll_interval: float = Field(
        default=0.5,
        description="Seconds between file modification polls",
    )

    watch_coalesce: float = Field(
        default=0.2,
        description="Changes seen within this many seconds of the last notification are merged",
    )

    # Output configuration
    export_filename: str = Field(
        default="deck.json",
        description="Filename of the JSON deck written by the CLI",
    )

    def scale_inRange(self, value: float) -> bool:
        """Check whether a scale percentage lies inside the accepted bounds"""
        return self.scale_min <= value <= self.scale_max

    def scale_clamp(self, value: float) -> float:
        """
        Clamp a scale percentage into [scale_min, scale_max].

        Example:
            >>> settings = AppSettings()
            >>> settings.scale_clamp(0.0)
            1.0
            >>> settings.scale_clamp(50.0)
            50.0
        """
        return min(max(value, self.scale_min), self.scale_max)


# Singleton instance - import this in your code
appsettings = AppSettings()
