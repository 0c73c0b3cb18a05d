"""Configuration-driven access guard and entitlement lookup.

Used by the standalone service and by tests. Platform deployments replace
them with adapters backed by the real authorization and plan services.
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from ....config.constants import EntitlementKey

logger = logging.getLogger(__name__)


class PermissiveAccessGuard:
    """Grants read and write everywhere and reports one fixed workspace role."""

    def __init__(self, workspace_role: Optional[str] = "owner"):
        self._role = workspace_role

    async def require_read(self, workspace_id: UUID, user_id: UUID, *, parent_type=None, parent_id=None) -> None:
        return None

    async def require_write(self, workspace_id: UUID, user_id: UUID, *, parent_type=None, parent_id=None) -> None:
        return None

    async def role_of(self, workspace_id: UUID, user_id: UUID) -> Optional[str]:
        return self._role


class StaticEntitlementLookup:
    """Same limits for every organization, with optional per-organization overrides."""

    def __init__(
        self,
        defaults: Optional[Dict[str, Optional[int]]] = None,
        overrides: Optional[Dict[UUID, Dict[str, Optional[int]]]] = None,
    ):
        self._defaults = dict(defaults or {})
        self._overrides = {org: dict(limits) for org, limits in (overrides or {}).items()}

    @classmethod
    def from_settings(cls, settings) -> "StaticEntitlementLookup":
        return cls(defaults={
            EntitlementKey.MAX_STORAGE_BYTES.value: settings.attachments_default_storage_limit_bytes,
            EntitlementKey.ATTACHMENT_RETENTION_DAYS.value: settings.attachments_default_retention_days,
        })

    def set_limit(self, organization_id: UUID, key: str, value: Optional[int]) -> None:
        self._overrides.setdefault(organization_id, {})[key] = value

    async def limit_for(self, organization_id: UUID, key: str) -> Optional[int]:
        limits = self._overrides.get(organization_id, {})
        if key in limits:
            return limits[key]
        return self._defaults.get(key)
