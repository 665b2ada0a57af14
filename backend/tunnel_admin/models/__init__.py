from .authz import Base, Permission, Role, RolePermission, User, UserRole
from .catalog import BidSection, WorkFace, Site
from .grants import UserResourcePermission
from .audit import AuditLog

__all__ = [
    'Base', 'Permission', 'Role', 'RolePermission', 'User', 'UserRole',
    'BidSection', 'WorkFace', 'Site', 'UserResourcePermission', 'AuditLog',
]
