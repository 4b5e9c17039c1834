"""
Middleware package for the Blood Bank Network Admin API.
"""
from .access import (
    ADMIN_PANEL_ROLES,
    ADMIN_WRITE_ROLES,
    RoleAccess,
    ReadAccess,
    WriteAccess
)

__all__ = [
    'ADMIN_PANEL_ROLES',
    'ADMIN_WRITE_ROLES',
    'RoleAccess',
    'ReadAccess',
    'WriteAccess'
]
