"""Utilities for the attachments feature."""

from .error_handling import attachment_error_handler, log_suppressed_failure, record_audit_safely
from .filenames import extension_of, sanitize_file_name, validate_extension
from .validation import AttachmentValidationRules

__all__ = [
    "attachment_error_handler",
    "log_suppressed_failure",
    "record_audit_safely",
    "extension_of",
    "sanitize_file_name",
    "validate_extension",
    "AttachmentValidationRules",
]
