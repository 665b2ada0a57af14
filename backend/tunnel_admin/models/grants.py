from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey, DateTime, UniqueConstraint, func, text

from .authz import Base


class UserResourcePermission(Base):
    """One granted resource path for a user.

    The full set of rows for a user is the user's granted set; it is only ever
    replaced wholesale (see services.permission_store.SqlPermissionStore).
    """
    __tablename__ = 'user_resource_permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(16), nullable=False)
    resource_path: Mapped[str] = mapped_column(String(255), nullable=False)
    user = relationship('User', back_populates='resource_permissions')
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    __table_args__ = (UniqueConstraint('user_id', 'resource_path', name='uq_user_resource_path'),)
