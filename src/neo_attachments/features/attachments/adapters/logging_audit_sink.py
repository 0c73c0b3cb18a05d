"""Audit sink that writes events to a dedicated logger.

Suitable for development and for deployments that ship logs to an external
audit store.
"""

import logging

from ..entities.audit_event import AuditEvent

audit_logger = logging.getLogger("neo_attachments.audit")


class LoggingAuditSink:
    """AuditSink writing one INFO record per event."""

    def __init__(self, logger: logging.Logger = audit_logger):
        self._logger = logger

    async def record(self, event: AuditEvent) -> None:
        payload = event.to_dict()
        self._logger.info(
            f"{payload['action']} {payload['entity_type']} {payload['entity_id']} by {payload['actor_user_id']}",
            extra={"audit": payload},
        )
