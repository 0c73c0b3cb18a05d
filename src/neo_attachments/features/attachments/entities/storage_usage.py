"""Storage usage ledger entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID


@dataclass
class StorageUsage:
    """One ledger row: byte counters for a single workspace."""

    organization_id: UUID
    workspace_id: UUID
    used_bytes: int = 0
    reserved_bytes: int = 0
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.used_bytes < 0 or self.reserved_bytes < 0:
            raise ValueError("Ledger counters cannot be negative")

    @property
    def effective_bytes(self) -> int:
        return self.used_bytes + self.reserved_bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "workspace_id": str(self.workspace_id),
            "used_bytes": self.used_bytes,
            "reserved_bytes": self.reserved_bytes,
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class LedgerDrift:
    """Difference between a ledger row and the attachment rows it accounts for."""

    organization_id: UUID
    workspace_id: UUID
    ledger_used_bytes: int
    ledger_reserved_bytes: int
    actual_used_bytes: int
    actual_reserved_bytes: int

    @property
    def used_delta(self) -> int:
        return self.ledger_used_bytes - self.actual_used_bytes

    @property
    def reserved_delta(self) -> int:
        return self.ledger_reserved_bytes - self.actual_reserved_bytes

    @property
    def has_drift(self) -> bool:
        return self.used_delta != 0 or self.reserved_delta != 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "workspace_id": str(self.workspace_id),
            "ledger_used_bytes": self.ledger_used_bytes,
            "ledger_reserved_bytes": self.ledger_reserved_bytes,
            "actual_used_bytes": self.actual_used_bytes,
            "actual_reserved_bytes": self.actual_reserved_bytes,
            "used_delta": self.used_delta,
            "reserved_delta": self.reserved_delta,
        }


@dataclass
class UsageReport:
    """Organization-wide usage alongside one workspace's ledger row."""

    organization_id: UUID
    effective_bytes: int
    used_bytes: int
    limit_bytes: Optional[int]
    workspace: Optional[StorageUsage] = None

    @property
    def ratio(self) -> Optional[float]:
        if not self.limit_bytes:
            return None
        return self.effective_bytes / self.limit_bytes
