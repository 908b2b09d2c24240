"""Utility helpers for FastTrack CLI."""
