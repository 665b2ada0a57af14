from __future__ import annotations
"""Tri-state selection over the catalog tree.

The granted set is a plain ``set`` of resource paths. Only site membership is
authoritative: branch (bd/gzw) states are always recomputed from the sites
below them, and branch paths in the set are never read back. Branch paths are
still written by ``toggle_branch`` because the permission store persists them.

All functions here are pure; they return new sets and never mutate input.
"""
from enum import Enum
from typing import AbstractSet, Dict, Iterable, Set

from tunnel_admin.services.hierarchy import HierarchyNode, iter_nodes
from tunnel_admin.services.resource_paths import Tier, site_path


class TriState(str, Enum):
    UNCHECKED = 'unchecked'
    INDETERMINATE = 'indeterminate'
    CHECKED = 'checked'


def toggle_site(granted: AbstractSet[str], site_id: str, checked: bool) -> Set[str]:
    out = set(granted)
    path = site_path(site_id)
    if checked:
        out.add(path)
    else:
        out.discard(path)
    return out


def toggle_branch(granted: AbstractSet[str], node: HierarchyNode, checked: bool) -> Set[str]:
    """Cascade a branch selection to the node itself and all its descendants."""
    if node.tier is Tier.SITE:
        raise ValueError(f'site {node.id!r} is not a branch node')
    out = set(granted)
    paths = {n.path for n in node.walk()}
    if checked:
        out |= paths
    else:
        out -= paths
    return out


def toggle_node(granted: AbstractSet[str], node: HierarchyNode, checked: bool) -> Set[str]:
    if node.tier is Tier.SITE:
        return toggle_site(granted, node.id, checked)
    return toggle_branch(granted, node, checked)


def aggregate(checked_count: int, total: int) -> TriState:
    if checked_count == 0:
        return TriState.UNCHECKED
    if checked_count == total:
        return TriState.CHECKED
    return TriState.INDETERMINATE


def branch_state(node: HierarchyNode, granted: AbstractSet[str]) -> TriState:
    total = 0
    checked = 0
    for site in node.sites():
        total += 1
        if site.path in granted:
            checked += 1
    return aggregate(checked, total)


def derive_ancestor_states(catalog: Iterable[HierarchyNode], granted: AbstractSet[str]) -> Dict[str, TriState]:
    """Tri-state of every bid-section and work-face, keyed by resource path."""
    return {
        node.path: branch_state(node, granted)
        for node in iter_nodes(catalog)
        if node.tier is not Tier.SITE
    }


class SelectionState:
    """Read-only tri-state view of a catalog against one granted set.

    Leaf states are computed once; branch states are derived on access so
    they always reflect leaf truth.
    """

    def __init__(self, catalog: Iterable[HierarchyNode], granted: AbstractSet[str]):
        self.catalog = list(catalog)
        self.granted = frozenset(granted)
        self.leaves: Dict[str, TriState] = {
            n.path: (TriState.CHECKED if n.path in self.granted else TriState.UNCHECKED)
            for n in iter_nodes(self.catalog)
            if n.tier is Tier.SITE
        }

    def state_of(self, node: HierarchyNode) -> TriState:
        if node.tier is Tier.SITE:
            return self.leaves.get(node.path, TriState.UNCHECKED)
        return branch_state(node, self.granted)

    def as_dict(self) -> Dict[str, TriState]:
        out = dict(self.leaves)
        out.update(derive_ancestor_states(self.catalog, self.granted))
        return out

    def checked_sites(self) -> Set[str]:
        return {p for p, s in self.leaves.items() if s is TriState.CHECKED}


def build_state(catalog: Iterable[HierarchyNode], granted: AbstractSet[str]) -> SelectionState:
    return SelectionState(catalog, granted)


__all__ = [
    'TriState', 'toggle_site', 'toggle_branch', 'toggle_node', 'aggregate', 'branch_state',
    'derive_ancestor_states', 'SelectionState', 'build_state',
]
