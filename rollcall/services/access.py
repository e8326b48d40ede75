"""
Session / authorization gateway.

Resolves the signed-in user from the Flask session and answers
permission questions against the organization's permission table.
Signing in is handled elsewhere; this module only reads
session['user_id'] and session['org_id'].
"""

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, session

from rollcall import db
from rollcall.models import Organization, OrgMembership, SmallGroup, User
from rollcall.services.errors import AuthenticationError, PermissionDenied
from rollcall.services.permissions import role_has_permission


@dataclass(frozen=True)
class Caller:
    user_id: int
    email: str
    name: str
    organization_id: int
    role: str
    status: str


def resolve_caller() -> Caller:
    """Build the Caller for the current request or raise AuthenticationError."""
    user_id = session.get('user_id')
    org_id = session.get('org_id')
    if not user_id or not org_id:
        raise AuthenticationError('Not authenticated')

    user = db.session.get(User, user_id)
    if not user:
        raise AuthenticationError('Not authenticated')

    membership = OrgMembership.query.filter_by(organization_id=org_id, user_id=user.id).first()
    if not membership:
        raise AuthenticationError('Not a member of this organization')

    return Caller(
        user_id=user.id,
        email=user.email,
        name=user.name,
        organization_id=membership.organization_id,
        role=membership.role,
        status=membership.status,
    )


def has_permission(caller: Optional[Caller], module: str, level: str = 'view') -> bool:
    if caller is None:
        return False
    org = db.session.get(Organization, caller.organization_id)
    overrides = org.permission_overrides if org else None
    return role_has_permission(caller.role, caller.status, module, level, overrides)


def is_attendance_admin(caller: Caller) -> bool:
    return has_permission(caller, 'attendance', 'admin')


def authorized_groups(caller: Caller, is_admin: bool = None) -> list:
    """
    Active groups the caller may see and mark.

    Attendance admins get every active group in their organization,
    everyone else only the groups they lead.
    """
    if is_admin is None:
        is_admin = is_attendance_admin(caller)

    query = SmallGroup.query.filter_by(organization_id=caller.organization_id, active=True)
    if not is_admin:
        query = query.filter(SmallGroup.leaders.any(User.id == caller.user_id))
    return query.order_by(SmallGroup.name).all()


def require_permission(module, level='view'):
    """Decorator to require a module permission. Exposes the caller as g.caller."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            caller = resolve_caller()
            if not has_permission(caller, module, level):
                raise PermissionDenied('Forbidden')
            g.caller = caller
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def login_required(f):
    """Decorator to require any signed-in organization member."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.caller = resolve_caller()
        return f(*args, **kwargs)
    return decorated_function
