"""
Role-based access dependencies for the admin panel.
"""
from typing import Iterable

from fastapi import Depends, HTTPException

from models import UserRole
from services import get_current_user

ADMIN_PANEL_ROLES = {UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value, UserRole.AUDITOR.value}
ADMIN_WRITE_ROLES = {UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value}


class RoleAccess:
    """Dependency that admits only users holding one of `roles`."""

    def __init__(self, roles: Iterable[str], detail: str):
        self.roles = set(roles)
        self.detail = detail

    async def __call__(self, current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") not in self.roles:
            raise HTTPException(status_code=403, detail=self.detail)
        return current_user


ReadAccess = RoleAccess(ADMIN_PANEL_ROLES, "Admin access required")
WriteAccess = RoleAccess(ADMIN_WRITE_ROLES, "Only ADMIN or SuperAdmin can modify organizations")
