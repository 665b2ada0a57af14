from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey, DateTime, text

from .authz import Base

# Organizational hierarchy: bid-section (bd) -> work-face (gzw) -> site.
# The *_id string columns are the opaque catalog ids used in resource paths.


class BidSection(Base):
    __tablename__ = 'bid_sections'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bd_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    construction_unit: Mapped[Optional[str]] = mapped_column(String(128))
    contractor_unit: Mapped[Optional[str]] = mapped_column(String(128))
    supervisor_unit: Mapped[Optional[str]] = mapped_column(String(128))
    start_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    stop_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    work_faces = relationship('WorkFace', back_populates='bid_section', cascade='all, delete-orphan', order_by='WorkFace.id')
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))


class WorkFace(Base):
    __tablename__ = 'work_faces'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    gzw_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(128))
    bid_section_id: Mapped[int] = mapped_column(ForeignKey('bid_sections.id', ondelete='CASCADE'), nullable=False, index=True)
    start_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    stop_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    bid_section = relationship('BidSection', back_populates='work_faces')
    sites = relationship('Site', back_populates='work_face', cascade='all, delete-orphan', order_by='Site.id')
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))


class Site(Base):
    __tablename__ = 'sites'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(128))
    site_code: Mapped[Optional[str]] = mapped_column(String(64))
    work_face_id: Mapped[int] = mapped_column(ForeignKey('work_faces.id', ondelete='CASCADE'), nullable=False, index=True)
    start_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    stop_kilo: Mapped[Optional[str]] = mapped_column(String(32))
    use_flag: Mapped[Optional[str]] = mapped_column(String(8))
    status: Mapped[int] = mapped_column(Integer, default=1)
    work_face = relationship('WorkFace', back_populates='sites')
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))
