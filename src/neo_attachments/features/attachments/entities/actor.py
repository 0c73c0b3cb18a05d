"""Caller identity passed from the API layer into services."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class ActorContext:
    """Authenticated caller of an attachment operation."""

    user_id: UUID
    organization_id: UUID
    platform_role: Optional[str] = None
