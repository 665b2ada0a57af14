from __future__ import annotations
from typing import Set
from flask_jwt_extended import get_jwt
from sqlalchemy import select
from tunnel_admin.models.authz import UserRole, RolePermission, Permission, Role
from tunnel_admin import get_db

WILDCARD_ROLE = 'Administrator'


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def has_permissions(*codes: str) -> bool:
    perms = current_permissions()
    return all(c in perms for c in codes)


def compute_effective_permissions(user_id: int):
    session = get_db()
    role_ids = {r.role_id for r in session.execute(select(UserRole).where(UserRole.user_id==user_id)).scalars()}
    perm_codes = set()
    if role_ids:
        perm_ids = [rp.permission_id for rp in session.execute(select(RolePermission).where(RolePermission.role_id.in_(role_ids))).scalars()]
        if perm_ids:
            for p in session.execute(select(Permission).where(Permission.id.in_(perm_ids))).scalars():
                perm_codes.add(p.code)
    # Administrator role expands to every known permission (wildcard semantics)
    admin_role = session.execute(select(Role).where(Role.name==WILDCARD_ROLE)).scalar_one_or_none()
    if admin_role and admin_role.id in role_ids:
        for p in session.execute(select(Permission)).scalars():
            perm_codes.add(p.code)
    return {
        'roles': sorted(role_ids),
        'perms': sorted(perm_codes),
    }
