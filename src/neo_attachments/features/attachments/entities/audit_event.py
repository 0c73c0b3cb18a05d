"""Audit event handed to the audit sink."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from ....config.constants import AuditAction, ENTITY_TYPE_ATTACHMENT


@dataclass(frozen=True)
class AuditEvent:
    """Immutable record of an attachment operation."""

    organization_id: UUID
    workspace_id: UUID
    actor_user_id: UUID
    action: AuditAction
    entity_id: UUID
    actor_role: Optional[str] = None
    entity_type: str = ENTITY_TYPE_ATTACHMENT
    metadata: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "workspace_id": str(self.workspace_id),
            "actor_user_id": str(self.actor_user_id),
            "actor_role": self.actor_role,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id),
            "action": self.action.value,
            "metadata": dict(self.metadata),
            "occurred_at": self.occurred_at.isoformat(),
        }
