"""CLI commands for FastTrack."""
