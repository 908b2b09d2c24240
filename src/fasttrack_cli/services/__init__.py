"""Services module for FastTrack CLI - business logic layer."""

from .config_service import ConfigService, get_config_service
from .side_effects import Failed, Ok
from .timer_service import FastingTimer, create_timer

__all__ = [
    "ConfigService",
    "get_config_service",
    "Failed",
    "Ok",
    "FastingTimer",
    "create_timer",
]
