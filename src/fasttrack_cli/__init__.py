"""FastTrack CLI - intermittent fasting timer with history."""

__version__ = "0.3.0"
