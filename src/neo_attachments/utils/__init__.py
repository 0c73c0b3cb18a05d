"""Shared utilities for neo-attachments."""

from .datetime import ensure_utc, utc_now

__all__ = ["ensure_utc", "utc_now"]
