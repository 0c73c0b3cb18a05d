"""Background jobs for neo-attachments."""

from .retention_job import RetentionJob, RetentionRunResult

__all__ = ["RetentionJob", "RetentionRunResult"]
