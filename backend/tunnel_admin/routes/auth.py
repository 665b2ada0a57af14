from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select
from tunnel_admin.models.authz import User
from tunnel_admin import get_db
from tunnel_admin.services.policy import compute_effective_permissions

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/login')
def login():
    data = request.json or {}
    account = data.get('account'); password = data.get('password')
    if not account or not password:
        abort(400, description='account & password required')
    session = get_db()
    user = session.execute(select(User).where(User.account==account)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        abort(401, description='invalid credentials')
    eff = compute_effective_permissions(user.id)
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims={'roles': eff['roles'], 'perms': eff['perms']})
    return {'access_token': token}


@auth_bp.get('/me')
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    eff = compute_effective_permissions(user.id)
    return {
        'id': user.id,
        'account': user.account,
        'name': user.name,
        'roles': eff['roles'],
        'perms': eff['perms'],
    }
