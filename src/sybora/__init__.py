"""Sybora - AI-assisted Sybase to Oracle conversion service."""

__version__ = "1.0.0"
