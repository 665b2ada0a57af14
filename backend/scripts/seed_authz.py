#!/usr/bin/env python
"""Idempotent seed script for admin permissions, roles and the demo catalog.

Usage:
    python backend/scripts/seed_authz.py               # seed normally
    python backend/scripts/seed_authz.py --demo-catalog
    python backend/scripts/seed_authz.py --show-roles  # print role -> permissions after seeding
    python backend/scripts/seed_authz.py --dry-run     # run logic then rollback (no DB changes)
"""
from __future__ import annotations
import os, sys, argparse
from sqlalchemy import text

# Allow running from repo root
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tunnel_admin import create_app, get_db  # noqa: E402
from tunnel_admin.models import Base  # noqa: E402
from tunnel_admin.seed import (  # noqa: E402
    ensure_permissions, ensure_roles, ensure_initial_admin, ensure_catalog, build_role_permission_map,
)


def parse_args():
    p = argparse.ArgumentParser(description="Seed admin permissions, roles and optional demo catalog")
    p.add_argument('--show-roles', action='store_true', help='Print role permissions after seeding')
    p.add_argument('--demo-catalog', action='store_true', help='Also create the demo bid-section/work-face/site tree')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
        except Exception:
            # Bootstrap schema when migrations were not run; prefer `alembic upgrade head`
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        try:
            created_p = ensure_permissions(session)
            created_r = ensure_roles(session)
            ensure_initial_admin(session)
            created_s = ensure_catalog(session) if args.demo_catalog else 0
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) permissions: {created_p}, roles: {created_r}, sites: {created_s}")
            else:
                session.commit()
                print(f"[DONE] Permissions created: {created_p}, Roles created: {created_r}, Sites created: {created_s}")
            if args.show_roles:
                for name, codes in sorted(build_role_permission_map(session).items()):
                    print(f"{name}: {', '.join(codes) or '-'}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
