from enum import Enum
from typing import Set

class Permission(str, Enum):
    """All application permissions (fine-grained access control)"""

    # Inventory
    VIEW_VEHICLES = "view:vehicles"
    CREATE_VEHICLES = "create:vehicles"
    EDIT_VEHICLES = "edit:vehicles"

    # Arbitration
    VIEW_ARB = "view:arb"
    INITIATE_ARB = "initiate:arb"

    # Tasks
    VIEW_TASKS = "view:tasks"
    MANAGE_TASKS = "manage:tasks"

    # Admin permissions
    MANAGE_DROPDOWNS = "manage:dropdowns"
    IMPERSONATE_USERS = "impersonate:users"


class Role(str, Enum):
    """Application roles (coarse-grained)"""
    ADMIN = "admin"
    SELLER = "seller"
    TRANSPORTER = "transporter"

# Permission matrix - what each role can do
ROLE_PERMISSIONS: dict[Role, Set[Permission]] = {
    Role.SELLER: {
        Permission.VIEW_VEHICLES,
        Permission.CREATE_VEHICLES,
        Permission.VIEW_ARB,
        Permission.INITIATE_ARB,
        Permission.VIEW_TASKS,
        Permission.MANAGE_TASKS,
    },
    Role.TRANSPORTER: {
        Permission.VIEW_VEHICLES,
        Permission.VIEW_TASKS,
        Permission.MANAGE_TASKS,  # Can close out pickup tasks
    },
    Role.ADMIN: set(Permission),  # All permissions
}


def has_permission(role: str | None, permission: Permission) -> bool:
    try:
        return permission in ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return False
