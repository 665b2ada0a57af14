from __future__ import annotations
"""In-memory catalog tree: bid-section -> work-face -> site.

``catalog_from_records`` builds the tree from the nested records returned by
``list_bid_sections``. Both the current field names (``workFaces``/``sites``)
and the legacy VO names (``bdInfoVO``/``gzwInfoVO``) are accepted.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from tunnel_admin.services.resource_paths import Tier, encode

_CHILD_TIER = {
    Tier.BID_SECTION: Tier.WORK_FACE,
    Tier.WORK_FACE: Tier.SITE,
    Tier.SITE: None,
}


@dataclass(frozen=True)
class HierarchyNode:
    tier: Tier
    id: str
    label: str = ''
    children: Tuple['HierarchyNode', ...] = field(default_factory=tuple)

    def __post_init__(self):
        expected = _CHILD_TIER[self.tier]
        for child in self.children:
            if child.tier is not expected:
                raise ValueError(f'{self.tier.name} node {self.id!r} cannot contain {child.tier.name} node {child.id!r}')

    @property
    def path(self) -> str:
        return encode(self.tier, self.id)

    @property
    def is_leaf(self) -> bool:
        return self.tier is Tier.SITE

    def walk(self) -> Iterator['HierarchyNode']:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def sites(self) -> Iterator['HierarchyNode']:
        return (n for n in self.walk() if n.tier is Tier.SITE)


Catalog = List[HierarchyNode]


def iter_nodes(catalog: Iterable[HierarchyNode]) -> Iterator[HierarchyNode]:
    for root in catalog:
        yield from root.walk()


def find_node(catalog: Iterable[HierarchyNode], path: str) -> Optional[HierarchyNode]:
    for node in iter_nodes(catalog):
        if node.path == path:
            return node
    return None


def _first(record: Dict[str, Any], *keys: str, default=None):
    for k in keys:
        if record.get(k) is not None:
            return record[k]
    return default


def _record_id(rec: Dict[str, Any], tier: Tier, *keys: str) -> str:
    value = _first(rec, *keys)
    if value is None or str(value) == '':
        raise ValueError(f'{tier.name} record without an id: {rec!r}')
    return str(value)


def _site_from_record(rec: Dict[str, Any]) -> HierarchyNode:
    site_id = _record_id(rec, Tier.SITE, 'siteId', 'site_id')
    label = _first(rec, 'siteName', 'sitename', default='') or site_id
    return HierarchyNode(Tier.SITE, site_id, label)


def _work_face_from_record(rec: Dict[str, Any]) -> HierarchyNode:
    gzw_id = _record_id(rec, Tier.WORK_FACE, 'gzwId', 'gzwID', 'gzw_id')
    label = _first(rec, 'gzwName', 'gzwname', default='') or gzw_id
    sites = _first(rec, 'sites', 'gzwInfoVO', default=[]) or []
    return HierarchyNode(Tier.WORK_FACE, gzw_id, label, tuple(_site_from_record(s) for s in sites))


def bid_section_from_record(rec: Dict[str, Any]) -> HierarchyNode:
    bd_id = _record_id(rec, Tier.BID_SECTION, 'bdId', 'bd_id')
    work_faces = _first(rec, 'workFaces', 'bdInfoVO', default=[]) or []
    return HierarchyNode(Tier.BID_SECTION, bd_id, bd_id, tuple(_work_face_from_record(w) for w in work_faces))


def catalog_from_records(records: Iterable[Dict[str, Any]]) -> Catalog:
    return [bid_section_from_record(r) for r in records]


__all__ = ['HierarchyNode', 'Catalog', 'iter_nodes', 'find_node', 'bid_section_from_record', 'catalog_from_records']
