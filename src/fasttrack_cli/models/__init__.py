"""FastTrack CLI domain models."""

from .config_models import AppConfig

__all__ = ["AppConfig"]
