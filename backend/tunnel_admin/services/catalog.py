from __future__ import annotations
from typing import Any, Dict, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from tunnel_admin import get_db
from tunnel_admin.models.catalog import BidSection, WorkFace, Site


def site_json(s: Site) -> Dict[str, Any]:
    return {
        'siteId': s.site_id,
        'siteName': s.name,
        'siteCode': s.site_code,
        'startKilo': s.start_kilo,
        'stopKilo': s.stop_kilo,
        'useFlag': s.use_flag,
    }


def work_face_json(w: WorkFace) -> Dict[str, Any]:
    return {
        'gzwId': w.gzw_id,
        'gzwName': w.name,
        'gzwStartKilo': w.start_kilo,
        'gzwStopKilo': w.stop_kilo,
        'sites': [site_json(s) for s in w.sites],
    }


def bid_section_json(b: BidSection) -> Dict[str, Any]:
    return {
        'bdId': b.bd_id,
        'constructionUnit': b.construction_unit,
        'contractorUnit': b.contractor_unit,
        'supervisorUnit': b.supervisor_unit,
        'bdStartKilo': b.start_kilo,
        'bdStopKilo': b.stop_kilo,
        'workFaces': [work_face_json(w) for w in b.work_faces],
    }


def flat_site_json(s: Site) -> Dict[str, Any]:
    return {
        'sitePk': s.id,
        'siteId': s.site_id,
        'siteName': s.name,
        'status': s.status,
        'gmtCreate': s.created_at.isoformat() if s.created_at else None,
    }


class SqlHierarchyCatalog:
    """Catalog provider reading the bd/gzw/site tables."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else get_db()

    def list_bid_sections(self, page: int, page_size: int) -> Tuple[List[Dict[str, Any]], int]:
        session = self.session
        total = session.execute(select(func.count(BidSection.id))).scalar_one()
        rows = session.execute(
            select(BidSection)
            .options(selectinload(BidSection.work_faces).selectinload(WorkFace.sites))
            .order_by(BidSection.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            # the scoped session outlives requests; reload collections cached by earlier reads
            .execution_options(populate_existing=True)
        ).scalars().all()
        return [bid_section_json(b) for b in rows], total

    def list_sites(self, page: int, page_size: int) -> Tuple[List[Site], int]:
        session = self.session
        total = session.execute(select(func.count(Site.id))).scalar_one()
        rows = session.execute(
            select(Site).order_by(Site.id.asc()).offset((page - 1) * page_size).limit(page_size)
        ).scalars().all()
        return rows, total


__all__ = ['SqlHierarchyCatalog', 'bid_section_json', 'work_face_json', 'site_json', 'flat_site_json']
