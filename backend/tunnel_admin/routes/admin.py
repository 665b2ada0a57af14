from __future__ import annotations
from flask import Blueprint, request, abort
from sqlalchemy import select, func
from tunnel_admin import get_db
from tunnel_admin.models.authz import User
from tunnel_admin.decorators.auth import require_permissions
from tunnel_admin.decorators.audit import audit_log
from tunnel_admin.services.catalog import SqlHierarchyCatalog, flat_site_json
from tunnel_admin.services.permission_store import SqlPermissionStore
from tunnel_admin.utils.listing import page_args, handle_conditional, make_cached_list_response

admin_bp = Blueprint('admin', __name__)


@admin_bp.get('/bd-gd/list')
@require_permissions('ADMIN.CATALOG.READ')
def list_bid_sections():
    page_num, page_size = page_args()
    rows, total = SqlHierarchyCatalog().list_bid_sections(page_num, page_size)
    resp, etag = make_cached_list_response(rows, total, page_num, page_size)
    cond = handle_conditional(etag)
    if cond:
        return cond
    return resp


@admin_bp.get('/gd/list')
@require_permissions('ADMIN.CATALOG.READ')
def list_sites():
    page_num, page_size = page_args()
    rows, total = SqlHierarchyCatalog().list_sites(page_num, page_size)
    resp, etag = make_cached_list_response([flat_site_json(s) for s in rows], total, page_num, page_size)
    cond = handle_conditional(etag)
    if cond:
        return cond
    return resp


@admin_bp.get('/user/list')
@require_permissions('ADMIN.USER.READ')
def list_users():
    page_num, page_size = page_args()
    session = get_db()
    total = session.execute(select(func.count(User.id))).scalar_one()
    users = session.execute(
        select(User).order_by(User.id.asc()).offset((page_num - 1) * page_size).limit(page_size)
    ).scalars().all()
    rows = [{'userPk': u.id, 'userAccount': u.account, 'userName': u.name, 'isActive': u.is_active} for u in users]
    resp, _ = make_cached_list_response(rows, total, page_num, page_size)
    return resp


def _get_user_or_404(user_id: int) -> User:
    user = get_db().execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        abort(404, description='user not found')
    return user


@admin_bp.get('/user/<int:user_id>/bd-gd/permission')
@require_permissions('ADMIN.PERMISSION.READ')
def get_user_grants(user_id: int):
    _get_user_or_404(user_id)
    return {'data': SqlPermissionStore().get_grants(user_id)}


@admin_bp.post('/user/<int:user_id>/bd-gd/permission')
@require_permissions('ADMIN.PERMISSION.MANAGE')
@audit_log(
    'USER.GRANTS.REPLACE',
    entity='User',
    entity_id_arg='user_id',
    meta_builder=lambda data, rv, a, kw: {'count': len(data.get('data', []))},
)
def replace_user_grants(user_id: int):
    _get_user_or_404(user_id)
    records = request.get_json(silent=True)
    if not isinstance(records, list):
        abort(400, description='body must be a list of {resourceType, resourcePath} records')
    for rec in records:
        # records may carry userPk/userId; it must agree with the path parameter
        owner = rec.get('userPk', rec.get('userId')) if isinstance(rec, dict) else None
        if owner is not None and owner != user_id:
            abort(400, description=f'record user {owner} does not match user {user_id}')
    try:
        grants = SqlPermissionStore().replace_grants(user_id, records)
    except ValueError as e:
        abort(400, description=str(e))
    return {'userId': user_id, 'data': grants}
