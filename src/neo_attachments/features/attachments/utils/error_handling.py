"""Error handling utilities for the attachments feature.

Repository methods are wrapped so that unexpected driver errors surface as
``DatabaseError`` while domain exceptions pass through unchanged. Compensating
actions that must never fail the primary operation are logged through
``log_suppressed_failure``.
"""

import functools
import logging
from typing import Any, Callable, Dict, Optional

from ....core.exceptions import DatabaseError, NeoAttachmentsError

logger = logging.getLogger(__name__)


def attachment_error_handler(
    operation_name: str,
    reraise: bool = True,
    default_return: Any = None,
    log_level: int = logging.ERROR,
):
    """Decorator for repository methods.

    Usage:
        @attachment_error_handler("reserve storage")
        async def reserve(self, ...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except NeoAttachmentsError:
                raise
            except Exception as e:
                logger.log(
                    log_level,
                    f"Failed to {operation_name}: {e}",
                    extra={
                        "operation": operation_name,
                        "function": func.__name__,
                        "error_type": type(e).__name__,
                    },
                )
                if reraise:
                    raise DatabaseError(f"Failed to {operation_name}: {e}") from e
                return default_return

        return wrapper
    return decorator


def log_suppressed_failure(
    tag: str,
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    log: Optional[logging.Logger] = None,
) -> None:
    """Log a failure that is intentionally not propagated to the caller.

    Args:
        tag: Stable upper-case tag for alerting, e.g. ``STORAGE_RESERVE_FAILED``
        error: The swallowed exception
        context: Identifiers describing the affected records
        log: Logger of the calling module
    """
    context = {key: str(value) for key, value in (context or {}).items()}
    (log or logger).warning(
        f"{tag}: {error}",
        extra={
            "context": tag,
            "error_type": type(error).__name__,
            **context,
        },
    )


async def record_audit_safely(audit_sink, event) -> None:
    """Hand an event to the audit sink; sink failures are logged, never raised."""
    if audit_sink is None:
        return
    try:
        await audit_sink.record(event)
    except Exception as e:
        log_suppressed_failure(
            "AUDIT_RECORD_FAILED",
            e,
            {"action": event.action.value, "attachment_id": event.entity_id},
        )
