"""initial schema: admin authz, bd/gzw/site catalog, user resource permissions

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, created: bool = False):
    cols = []
    if created:
        cols.append(sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')))
    cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')))
    return cols


def upgrade():
    op.create_table('permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=64), nullable=False, unique=True),
        sa.Column('service', sa.String(length=32), nullable=False),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('description_i18n', sa.JSON(), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_permissions_code', 'permissions', ['code'])
    op.create_index('ix_permissions_service', 'permissions', ['service'])

    op.create_table('roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False, unique=True),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('description_i18n', sa.JSON(), nullable=True),
        *_timestamps()
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=128)),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        *_timestamps()
    )
    op.create_index('ix_users_account', 'users', ['account'])

    op.create_table('role_permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_id', sa.Integer(), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permission'),
    )

    op.create_table('user_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('user_id', 'role_id', name='uq_user_role'),
    )

    op.create_table('bid_sections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bd_id', sa.String(length=64), nullable=False, unique=True),
        sa.Column('construction_unit', sa.String(length=128)),
        sa.Column('contractor_unit', sa.String(length=128)),
        sa.Column('supervisor_unit', sa.String(length=128)),
        sa.Column('start_kilo', sa.String(length=32)),
        sa.Column('stop_kilo', sa.String(length=32)),
        *_timestamps()
    )
    op.create_index('ix_bid_sections_bd_id', 'bid_sections', ['bd_id'])

    op.create_table('work_faces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('gzw_id', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=128)),
        sa.Column('bid_section_id', sa.Integer(), sa.ForeignKey('bid_sections.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_kilo', sa.String(length=32)),
        sa.Column('stop_kilo', sa.String(length=32)),
        *_timestamps()
    )
    op.create_index('ix_work_faces_gzw_id', 'work_faces', ['gzw_id'])
    op.create_index('ix_work_faces_bid_section_id', 'work_faces', ['bid_section_id'])

    op.create_table('sites',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('site_id', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=128)),
        sa.Column('site_code', sa.String(length=64)),
        sa.Column('work_face_id', sa.Integer(), sa.ForeignKey('work_faces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_kilo', sa.String(length=32)),
        sa.Column('stop_kilo', sa.String(length=32)),
        sa.Column('use_flag', sa.String(length=8)),
        sa.Column('status', sa.Integer(), nullable=False, server_default=sa.text('1')),
        *_timestamps(created=True)
    )
    op.create_index('ix_sites_site_id', 'sites', ['site_id'])
    op.create_index('ix_sites_work_face_id', 'sites', ['work_face_id'])

    op.create_table('user_resource_permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resource_type', sa.String(length=16), nullable=False),
        sa.Column('resource_path', sa.String(length=255), nullable=False),
        *_timestamps(created=True),
        sa.UniqueConstraint('user_id', 'resource_path', name='uq_user_resource_path'),
    )
    op.create_index('ix_user_resource_permissions_user_id', 'user_resource_permissions', ['user_id'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('perms_snapshot', sa.JSON(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_audit_actor', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_action', 'audit_logs', ['action'])


def downgrade():
    for tbl in ['audit_logs', 'user_resource_permissions', 'sites', 'work_faces', 'bid_sections',
                'user_roles', 'role_permissions', 'users', 'roles', 'permissions']:
        op.drop_table(tbl)
