from __future__ import annotations
"""Audit logging decorator for mutating admin endpoints.

Usage:

@audit_log('USER.GRANTS.REPLACE', entity='User', entity_id_arg='user_id',
           meta_builder=lambda data, rv, args, kwargs: {'count': len(data['data'])})
def replace_user_grants(user_id): ...

Parameters:
  action: required audit action code
  entity: optional entity label (User, ...)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: name of the path parameter to use for entity_id (fallback if entity_id_key absent).
  meta_builder: callable returning a meta dict; receives (data, original_return_value, args, kwargs).

Only successful (2xx) responses are audited; aborts propagate untouched.
"""

from functools import wraps
import logging
from typing import Any, Callable, Optional

from tunnel_admin.services.audit import add_audit
from tunnel_admin import get_db

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return (data, status) for dict / (dict, status) / (dict, status, headers) returns."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 300:
                return rv
            entity_id = None
            if isinstance(data, dict) and entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            meta = meta_builder(data, rv, args, kwargs) if meta_builder else None
            try:
                add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except Exception:
                # the audited change is already committed; never turn it into a 500
                logger.exception('Failed to record audit entry %s', action)
                get_db().rollback()
            return rv
        return wrapper
    return outer
