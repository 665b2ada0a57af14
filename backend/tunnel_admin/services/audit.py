from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from tunnel_admin import get_db
from tunnel_admin.models.audit import AuditLog


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Stage an audit log entry in the current DB session.

    Parameters:
      action: short action code e.g. USER.GRANTS.REPLACE
      entity: optional entity name (User, ...)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary
    """
    session = get_db()
    try:
        claims = get_jwt() or {}
        ident = get_jwt_identity()
    except RuntimeError:
        # outside a verified request (scripts, tests calling services directly)
        claims, ident = {}, None
    log = AuditLog(
        actor_user_id=int(ident) if ident is not None else 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        perms_snapshot={'perms': claims.get('perms', [])},
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
