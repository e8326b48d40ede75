"""
Role -> permission level resolution.

Levels are ordered none < view < edit < admin. An organization can
override the level for any (module, role) pair of a module listed in
DEFAULT_MODULES; overrides naming other modules are ignored. Anything
not overridden falls back to DEFAULT_MODULES, then ROLE_DEFAULTS, then
'none'.
"""

PERMISSION_LEVELS = {'none': 0, 'view': 1, 'edit': 2, 'admin': 3}

ROLES = ['pending', 'approved', 'leader', 'admin', 'viewer', 'demo']

ROLE_DEFAULTS = {
    'pending': 'view',
    'approved': 'edit',
    'leader': 'edit',
    'admin': 'admin',
    'viewer': 'view',
    'demo': 'view',
}

DEFAULT_MODULES = {
    'roster':       {'pending': 'view', 'approved': 'edit', 'leader': 'edit', 'admin': 'admin', 'demo': 'view', 'viewer': 'view'},
    'activity':     {'pending': 'view', 'approved': 'view', 'leader': 'edit', 'admin': 'admin', 'demo': 'view', 'viewer': 'view'},
    'brainDump':    {'pending': 'none', 'approved': 'edit', 'leader': 'edit', 'admin': 'admin', 'demo': 'none', 'viewer': 'none'},
    'attendance':   {'pending': 'view', 'approved': 'edit', 'leader': 'edit', 'admin': 'admin', 'demo': 'view', 'viewer': 'view'},
    'hangoutNotes': {'pending': 'none', 'approved': 'edit', 'leader': 'edit', 'admin': 'admin', 'demo': 'view', 'viewer': 'none'},
    'adminland':    {'pending': 'none', 'approved': 'none', 'leader': 'none', 'admin': 'admin', 'demo': 'none', 'viewer': 'none'},
    'dashboard':    {'pending': 'view', 'approved': 'view', 'leader': 'view', 'admin': 'admin', 'demo': 'view', 'viewer': 'view'},
}


def resolve_level(module: str, role: str, overrides: dict = None) -> str:
    """Permission level a role holds on a module for one organization."""
    if module in DEFAULT_MODULES:
        override = ((overrides or {}).get(module) or {}).get(role)
        if override in PERMISSION_LEVELS:
            return override
    default = DEFAULT_MODULES.get(module, {}).get(role)
    if default:
        return default
    return ROLE_DEFAULTS.get(role, 'none')


def level_at_least(level: str, required: str) -> bool:
    return PERMISSION_LEVELS.get(level, 0) >= PERMISSION_LEVELS.get(required, 0)


def role_has_permission(role: str, status: str, module: str, required: str, overrides: dict = None) -> bool:
    """
    Check a membership against the permission table.

    Org admins always pass. Demo accounts never get more than 'view'.
    Memberships that are not approved only count while they are still
    'pending' (pending has its own, mostly read-only, column).
    """
    if role == 'admin':
        return True
    if role == 'demo' and PERMISSION_LEVELS.get(required, 0) > PERMISSION_LEVELS['view']:
        return False
    if status and status != 'approved' and role != 'pending':
        return False
    return level_at_least(resolve_level(module, role or 'pending', overrides), required)
