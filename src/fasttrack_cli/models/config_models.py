"""Configuration models for FastTrack CLI.

The configuration lives in ``config.json`` under the platform config directory
and is validated with Pydantic on load.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class FastingConfig(BaseModel):
    """Defaults for starting, extending and charting fasts."""

    default_hours: float = Field(default=16, description="Planned hours for a new fast")
    extend_hours: float = Field(default=1, description="Step used by 'extend'")
    chart_days: int = Field(default=14, description="Days shown by 'chart'")

    @field_validator("default_hours", "extend_hours")
    @classmethod
    def validate_positive_hours(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Hours must be greater than zero")
        return v

    @field_validator("chart_days")
    @classmethod
    def validate_chart_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError("chart_days must be at least 1")
        return v


class NotificationConfig(BaseModel):
    """End-of-fast alert configuration."""

    enabled: bool = Field(default=True)
    timeout_seconds: float = Field(default=5.0)
    title: str = Field(default="Fast complete 🎉")
    body: str = Field(default="Time to re-fuel mindfully.")


class StorageConfig(BaseModel):
    """Where the snapshot and the pending alert queue are kept."""

    data_dir: str | None = Field(
        default=None, description="Override for the platform data directory"
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    color: bool = Field(default=True)
    verbose_logging: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main configuration."""

    model_config = {"extra": "ignore"}

    fasting: FastingConfig = Field(default_factory=FastingConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
