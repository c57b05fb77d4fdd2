"""Role checks for the moderation capability.

Only ``platform_admin`` may reply to interests or change ban state.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from marketdesk.auth.models import Role, User
from marketdesk.interests.models import Moderator


def has_permission(user: User, required_role: Role) -> bool:
    """Check if a user's role meets or exceeds the required role level."""
    user_role = user.role if isinstance(user.role, Role) else Role(user.role)
    return user_role.level >= required_role.level


def require_role(user: User, role: Role) -> None:
    """Raise ``HTTPException(403)`` if *user* lacks *role*.

    Call this before touching the gateway so an unauthorised request never
    mutates anything::

        @router.post("/users/{user_id}/suspend")
        def suspend(user_id: str, user: User = Depends(get_current_user)):
            require_role(user, Role.platform_admin)
            ...
    """
    if not has_permission(user, role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Requires role '{role.value}' or higher",
        )


def as_moderator(user: User) -> Moderator:
    """Return the reply author identity for an authorised platform admin."""
    require_role(user, Role.platform_admin)
    return Moderator(id=user.id, name=user.name)
