"""Attachment router dependencies.

Services including these routers override ``get_attachment_service`` and
``get_retention_service`` with configured instances, and normally replace
``get_current_actor`` with their authentication dependency. The header based
actor resolver is meant for development and internal tooling.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from ..entities.actor import ActorContext


def get_attachment_service():
    """Placeholder for attachment service dependency.

    Services should override this to provide a configured AttachmentService.
    """
    raise NotImplementedError(
        "Services must provide their own attachment service dependency"
    )


def get_retention_service():
    """Placeholder for retention service dependency."""
    raise NotImplementedError(
        "Services must provide their own retention service dependency"
    )


async def get_current_actor(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_organization_id: Optional[str] = Header(None, alias="X-Organization-Id"),
    x_platform_role: Optional[str] = Header(None, alias="X-Platform-Role"),
) -> ActorContext:
    """Resolve the caller from identity headers."""
    if not x_user_id or not x_organization_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity"
        )
    try:
        return ActorContext(
            user_id=UUID(x_user_id),
            organization_id=UUID(x_organization_id),
            platform_role=x_platform_role,
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity"
        )


PLATFORM_ADMIN_ROLES = frozenset({"admin", "platform_admin", "superadmin"})


async def require_platform_admin(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
    """Restrict maintenance endpoints to platform administrators."""
    if (actor.platform_role or "").lower() not in PLATFORM_ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform administrator role required"
        )
    return actor
