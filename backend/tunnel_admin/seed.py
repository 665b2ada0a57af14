from __future__ import annotations
"""Idempotent seeding of admin permissions, role presets, the initial admin
account and (optionally) a demo bd/gzw/site catalog.

Used by scripts/seed_authz.py and by tests. Functions only stage changes in
the given session; the caller commits or rolls back.
"""
import os
from typing import Dict, List, Tuple
from sqlalchemy import select

from tunnel_admin.constants.permissions import SERVICE_ACTIONS, ROLE_PRESETS, build_all_permission_codes
from tunnel_admin.models.authz import Permission, Role, RolePermission, User, UserRole
from tunnel_admin.models.catalog import BidSection, WorkFace, Site

# bd_id -> [(gzw_id, gzw name, [(site_id, site name), ...]), ...]
DEMO_CATALOG: Dict[str, List[Tuple[str, str, List[Tuple[str, str]]]]] = {
    'BD-01': [
        ('GZW-0101', 'Entrance portal heading', [('SITE-010101', 'DK12+300 face'), ('SITE-010102', 'DK12+450 face')]),
        ('GZW-0102', 'Inclined shaft 1', [('SITE-010201', 'Shaft 1 main face')]),
    ],
    'BD-02': [
        ('GZW-0201', 'Exit portal heading', [('SITE-020101', 'DK20+100 face')]),
        ('GZW-0202', 'Inclined shaft 2', []),
    ],
}


def ensure_permissions(session) -> int:
    existing = {p.code for p in session.execute(select(Permission)).scalars().all()}
    created = 0
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            code = f"{svc}.{act}"
            if code not in existing:
                session.add(Permission(code=code, service=svc, action=act, description_i18n={"en": code.replace('.', ' - ')}))
                created += 1
    session.flush()
    return created


def ensure_roles(session) -> int:
    existing_roles = {r.name: r for r in session.execute(select(Role)).scalars().all()}
    created = 0
    for role_name in ROLE_PRESETS:
        if role_name not in existing_roles:
            role = Role(name=role_name, is_system=True, description_i18n={"en": role_name})
            session.add(role)
            existing_roles[role_name] = role
            created += 1
    session.flush()

    all_codes = set(build_all_permission_codes())
    perms_map = {p.code: p for p in session.execute(select(Permission)).scalars()}
    for role_name, raw_codes in ROLE_PRESETS.items():
        role = existing_roles[role_name]
        desired = all_codes if '*' in raw_codes else set(raw_codes)
        current = {rp.permission.code for rp in role.permissions}
        for code in sorted(desired - current):
            if code not in perms_map:
                print(f"[WARN] Missing permission referenced by role {role_name}: {code}")
                continue
            session.add(RolePermission(role=role, permission=perms_map[code]))
    session.flush()
    return created


def ensure_initial_admin(session):
    admin_role = session.execute(select(Role).where(Role.name=='Administrator')).scalar_one_or_none()
    if not admin_role:
        print('[WARN] Administrator role missing; skipping admin user creation')
        return None
    account = os.getenv('SEED_ADMIN_ACCOUNT', 'admin')
    user = session.execute(select(User).where(User.account==account)).scalar_one_or_none()
    if user:
        return user
    user = User(account=account, name='Administrator', password_hash='')
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    session.flush()
    session.add(UserRole(user_id=user.id, role_id=admin_role.id))
    print(f"[INFO] Created initial admin account {account} with temporary password.")
    return user


def ensure_catalog(session, catalog=None) -> int:
    """Create missing bid-sections, work-faces and sites; returns sites created."""
    catalog = DEMO_CATALOG if catalog is None else catalog
    created = 0
    for bd_id, work_faces in catalog.items():
        bd = session.execute(select(BidSection).where(BidSection.bd_id==bd_id)).scalar_one_or_none()
        if not bd:
            bd = BidSection(bd_id=bd_id)
            session.add(bd); session.flush()
        for gzw_id, gzw_name, sites in work_faces:
            wf = session.execute(select(WorkFace).where(WorkFace.gzw_id==gzw_id)).scalar_one_or_none()
            if not wf:
                wf = WorkFace(gzw_id=gzw_id, name=gzw_name, bid_section_id=bd.id)
                session.add(wf); session.flush()
            for site_id, site_name in sites:
                if session.execute(select(Site).where(Site.site_id==site_id)).scalar_one_or_none():
                    continue
                session.add(Site(site_id=site_id, name=site_name, work_face_id=wf.id))
                created += 1
    session.flush()
    return created


def build_role_permission_map(session) -> Dict[str, List[str]]:
    return {
        role.name: sorted({rp.permission.code for rp in role.permissions})
        for role in session.execute(select(Role)).scalars().all()
    }
