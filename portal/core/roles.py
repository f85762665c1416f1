"""
Role-based permissions, navigation access and mention scoping.

Every role-dependent decision in the service reads one of the tables below,
keyed by the closed ``Role`` enum, instead of branching on role strings.
"""
import enum
from typing import Dict, FrozenSet, List, Tuple


class Role(str, enum.Enum):
    """Organization role of a portal user."""
    ADMIN = "admin"
    TEAM_MEMBER = "team_member"
    CLIENT = "client"


class Permission(str, enum.Enum):
    """Permission identifiers, formatted as ``resource:action``."""
    USERS_VIEW = "users:view"
    USERS_CREATE = "users:create"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    USERS_INVITE = "users:invite"
    USERS_MANAGE_ROLES = "users:manage_roles"

    ORGANIZATION_VIEW = "organization:view"
    ORGANIZATION_UPDATE = "organization:update"
    ORGANIZATION_DELETE = "organization:delete"
    ORGANIZATION_MANAGE_SETTINGS = "organization:manage_settings"
    ORGANIZATION_MANAGE_BILLING = "organization:manage_billing"

    PROJECTS_VIEW_ALL = "projects:view_all"
    PROJECTS_VIEW_ASSIGNED = "projects:view_assigned"
    PROJECTS_CREATE = "projects:create"
    PROJECTS_UPDATE = "projects:update"
    PROJECTS_DELETE = "projects:delete"
    PROJECTS_MANAGE_TASKS = "projects:manage_tasks"
    PROJECTS_MANAGE_MILESTONES = "projects:manage_milestones"
    PROJECTS_MANAGE_TEAM = "projects:manage_team"
    PROJECTS_ASSIGN_MEMBERS = "projects:assign_members"
    PROJECTS_REMOVE_MEMBERS = "projects:remove_members"

    CLIENTS_VIEW_ALL = "clients:view_all"
    CLIENTS_VIEW_ASSIGNED = "clients:view_assigned"
    CLIENTS_CREATE = "clients:create"
    CLIENTS_UPDATE = "clients:update"
    CLIENTS_DELETE = "clients:delete"
    CLIENTS_MANAGE_ACCESS = "clients:manage_access"

    DOCUMENTS_VIEW = "documents:view"
    DOCUMENTS_UPLOAD = "documents:upload"
    DOCUMENTS_DELETE = "documents:delete"
    DOCUMENTS_MANAGE = "documents:manage"

    ANALYTICS_VIEW_BASIC = "analytics:view_basic"
    ANALYTICS_VIEW_ADVANCED = "analytics:view_advanced"
    ANALYTICS_EXPORT = "analytics:export"

    SUPPORT_VIEW_TICKETS = "support:view_tickets"
    SUPPORT_CREATE_TICKETS = "support:create_tickets"
    SUPPORT_MANAGE_TICKETS = "support:manage_tickets"

    BILLING_VIEW = "billing:view"
    BILLING_MANAGE = "billing:manage"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.TEAM_MEMBER: frozenset({
        # Assigned projects only
        Permission.PROJECTS_VIEW_ASSIGNED,
        Permission.PROJECTS_UPDATE,
        Permission.PROJECTS_MANAGE_TASKS,
        Permission.PROJECTS_MANAGE_MILESTONES,
        Permission.DOCUMENTS_VIEW,
        Permission.DOCUMENTS_UPLOAD,
        Permission.BILLING_VIEW,
        Permission.SUPPORT_CREATE_TICKETS,
        Permission.SUPPORT_VIEW_TICKETS,
    }),
    Role.CLIENT: frozenset({
        # Their own projects and client record only
        Permission.PROJECTS_VIEW_ASSIGNED,
        Permission.CLIENTS_VIEW_ASSIGNED,
        Permission.DOCUMENTS_VIEW,
        Permission.DOCUMENTS_UPLOAD,
        Permission.SUPPORT_CREATE_TICKETS,
        Permission.SUPPORT_VIEW_TICKETS,
        Permission.BILLING_VIEW,
    }),
}

# Route -> permissions, any one of which opens the route. Order is menu order.
NAVIGATION_ACCESS: Tuple[Tuple[str, FrozenSet[Permission]], ...] = (
    ("/dashboard", frozenset({Permission.PROJECTS_VIEW_ALL, Permission.PROJECTS_VIEW_ASSIGNED})),
    ("/projects", frozenset({Permission.PROJECTS_VIEW_ALL, Permission.PROJECTS_VIEW_ASSIGNED})),
    ("/clients", frozenset({Permission.CLIENTS_VIEW_ALL})),
    ("/team", frozenset({Permission.USERS_VIEW})),
    ("/onboarding", frozenset({Permission.ORGANIZATION_MANAGE_SETTINGS})),
    ("/assets", frozenset({Permission.DOCUMENTS_VIEW})),
    ("/brand-kit", frozenset({Permission.DOCUMENTS_VIEW})),
    ("/billing", frozenset({Permission.BILLING_VIEW})),
    ("/analytics", frozenset({Permission.ANALYTICS_VIEW_BASIC, Permission.ANALYTICS_VIEW_ADVANCED})),
    ("/support", frozenset({Permission.SUPPORT_VIEW_TICKETS, Permission.SUPPORT_CREATE_TICKETS})),
    ("/messages", frozenset({Permission.PROJECTS_VIEW_ALL, Permission.PROJECTS_VIEW_ASSIGNED})),
    ("/settings", frozenset({Permission.ORGANIZATION_VIEW})),
    ("/admin", frozenset({Permission.USERS_MANAGE_ROLES, Permission.ORGANIZATION_MANAGE_SETTINGS})),
)

MENTIONABLE_ROLES: Dict[Role, FrozenSet[Role]] = {
    Role.ADMIN: frozenset({Role.CLIENT, Role.TEAM_MEMBER}),
    Role.TEAM_MEMBER: frozenset({Role.ADMIN}),
    Role.CLIENT: frozenset({Role.ADMIN}),
}

_ROUTE_INDEX = dict(NAVIGATION_ACCESS)


def permissions_for(role: Role) -> FrozenSet[Permission]:
    """Return the permission set granted to ``role``."""
    return ROLE_PERMISSIONS[Role(role)]


def has_permission(role: Role, permission: Permission) -> bool:
    return Permission(permission) in permissions_for(role)


def can_access_route(role: Role, route: str) -> bool:
    """
    Check whether ``role`` may open ``route``.
    
    Routes missing from the navigation table carry no restriction.
    """
    required = _ROUTE_INDEX.get(route)
    if required is None:
        return True
    return bool(required & permissions_for(role))


def navigation_for(role: Role) -> List[str]:
    """List the navigation routes available to ``role`` in menu order."""
    granted = permissions_for(role)
    return [route for route, required in NAVIGATION_ACCESS if required & granted]


def can_mention(author_role: Role, target_role: Role) -> bool:
    return Role(target_role) in MENTIONABLE_ROLES[Role(author_role)]
