from __future__ import annotations
"""Database-backed permission store: one user's granted resource paths.

Writes are full replacements. ``replace_grants`` deletes every existing row
for the user and inserts the new set inside the caller's session
transaction, so a failure leaves the previous set untouched.
"""
from typing import Any, Dict, Iterable, List, Tuple
from sqlalchemy import select, delete

from tunnel_admin import get_db
from tunnel_admin.errors import InvalidPathFormat
from tunnel_admin.models.grants import UserResourcePermission
from tunnel_admin.services.resource_paths import resource_type


def grant_json(row: UserResourcePermission) -> Dict[str, Any]:
    return {
        'id': row.id,
        'userId': row.user_id,
        'resourceType': row.resource_type,
        'resourcePath': row.resource_path,
        'grantedAt': row.created_at.isoformat() if row.created_at else None,
    }


def normalize_grant_records(records: Iterable[Any]) -> List[Tuple[str, str]]:
    """Validate incoming ``{resourceType, resourcePath}`` records.

    Returns de-duplicated ``(resource_type, resource_path)`` pairs in input
    order. A missing resourceType is derived from the path; a resourceType
    that contradicts the path prefix is rejected.
    """
    out: List[Tuple[str, str]] = []
    seen = set()
    for idx, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise ValueError(f'record {idx} must be an object')
        path = rec.get('resourcePath')
        try:
            rtype = resource_type(path)
        except InvalidPathFormat as e:
            raise ValueError(str(e))
        declared = rec.get('resourceType')
        if declared is not None and declared != rtype:
            raise ValueError(f"resourceType {declared!r} does not match path {path!r}")
        if path in seen:
            continue
        seen.add(path)
        out.append((rtype, path))
    return out


class SqlPermissionStore:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else get_db()

    def get_grants(self, user_id: int) -> List[Dict[str, Any]]:
        rows = self.session.execute(
            select(UserResourcePermission)
            .where(UserResourcePermission.user_id == user_id)
            .order_by(UserResourcePermission.id.asc())
        ).scalars().all()
        return [grant_json(r) for r in rows]

    def granted_paths(self, user_id: int) -> set:
        return {g['resourcePath'] for g in self.get_grants(user_id)}

    def replace_grants(self, user_id: int, records: Iterable[Any]) -> List[Dict[str, Any]]:
        pairs = normalize_grant_records(records)
        session = self.session
        try:
            session.execute(delete(UserResourcePermission).where(UserResourcePermission.user_id == user_id))
            for rtype, path in pairs:
                session.add(UserResourcePermission(user_id=user_id, resource_type=rtype, resource_path=path))
            session.commit()
        except Exception:
            session.rollback()
            raise
        return self.get_grants(user_id)


__all__ = ['SqlPermissionStore', 'grant_json', 'normalize_grant_records']
