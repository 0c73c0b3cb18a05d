"""Database access for neo-attachments."""

from .connection import DatabaseManager, affected_rows

__all__ = ["DatabaseManager", "affected_rows"]
