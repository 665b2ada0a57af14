from __future__ import annotations
"""Controller behind the "configure site permissions" panel.

Collaborators are duck-typed:

* catalog: ``list_bid_sections(page, page_size) -> (records, total)``
* store:   ``get_grants(user_id) -> [{resourcePath, resourceType, ...}]`` and
           ``replace_grants(user_id, [{userId, resourceType, resourcePath}])``

Both the SQL implementations and AdminApiClient satisfy them. Network I/O
only happens in ``open``/``refresh`` (reads) and ``save`` (one write); toggles
mutate the local working copy. Collaborator failures never propagate: they
are logged and recorded on ``errors`` for display.
"""
import logging
from typing import Any, Dict, List, Optional, Set

from tunnel_admin.errors import (
    AdminApiError, CatalogUnavailable, GrantLoadFailed, PanelError, PanelStateError, SaveFailed,
)
from tunnel_admin.services.hierarchy import HierarchyNode, catalog_from_records, find_node
from tunnel_admin.services.resource_paths import classify
from tunnel_admin.services.selection import SelectionState, TriState, build_state, toggle_node

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def _failure_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, (AdminApiError, PanelError)):
        return exc.message
    return str(exc) or fallback


class PermissionPanel:
    def __init__(self, catalog, store, page_size: int = DEFAULT_PAGE_SIZE):
        self.catalog_source = catalog
        self.store = store
        self.page_size = page_size
        self.user_id: Optional[int] = None
        self.catalog: List[HierarchyNode] = []
        self.grants: List[Dict[str, Any]] = []  # read-only table, always server truth
        self.working: Set[str] = set()
        self.is_open = False
        self.saving = False
        self.errors: List[PanelError] = []
        self.skipped_paths: List[Any] = []

    @property
    def last_error(self) -> Optional[PanelError]:
        return self.errors[-1] if self.errors else None

    def _fail(self, error: PanelError, exc: Exception):
        logger.warning('%s for user %s: %s', type(error).__name__, self.user_id, exc)
        self.errors.append(error)

    # --- reads ---

    def _load_catalog(self) -> List[HierarchyNode]:
        records: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch, total = self.catalog_source.list_bid_sections(page, self.page_size)
            records.extend(batch)
            if not batch or len(records) >= total:
                break
            page += 1
        return catalog_from_records(records)

    def refresh(self) -> List[Dict[str, Any]]:
        """Reload the read-only grant table for the selected user."""
        if self.user_id is None:
            raise PanelStateError('no user selected')
        try:
            self.grants = list(self.store.get_grants(self.user_id))
        except Exception as e:
            self._fail(GrantLoadFailed(_failure_message(e, 'failed to load user permissions')), e)
            return self.grants
        return self.grants

    def select_user(self, user_id: int) -> List[Dict[str, Any]]:
        if self.is_open:
            raise PanelStateError('close the panel before switching user')
        self.user_id = user_id
        self.grants = []
        return self.refresh()

    def open(self, user_id: int) -> SelectionState:
        """Load catalog and existing grants, then build the initial state.

        A catalog failure leaves an empty tree; a grant failure leaves an
        empty working copy. Neither blocks the panel from opening.
        """
        self.user_id = user_id
        self.errors = []
        self.skipped_paths = []
        try:
            self.catalog = self._load_catalog()
        except Exception as e:
            self.catalog = []
            self._fail(CatalogUnavailable(_failure_message(e, 'failed to load bid-section catalog')), e)
        self.working = set()
        self.grants = []
        try:
            self.grants = list(self.store.get_grants(user_id))
            self.working = {g['resourcePath'] for g in self.grants if g.get('resourcePath')}
        except Exception as e:
            self._fail(GrantLoadFailed(_failure_message(e, 'failed to load user permissions')), e)
        self.is_open = True
        logger.info('Permission panel opened for user %s: %d bid sections, %d grants', user_id, len(self.catalog), len(self.working))
        return self.state()

    # --- local mutation ---

    def _require_open(self):
        if not self.is_open:
            raise PanelStateError('permission panel is not open')

    def toggle(self, node: HierarchyNode, checked: bool) -> Dict[str, TriState]:
        self._require_open()
        self.working = toggle_node(self.working, node, checked)
        return self.states()

    def toggle_path(self, path: str, checked: bool) -> Dict[str, TriState]:
        self._require_open()
        node = find_node(self.catalog, path)
        if node is None:
            raise KeyError(f'{path} is not in the loaded catalog')
        return self.toggle(node, checked)

    def state(self) -> SelectionState:
        return build_state(self.catalog, self.working)

    def states(self) -> Dict[str, TriState]:
        return self.state().as_dict()

    def state_of(self, node: HierarchyNode) -> TriState:
        return self.state().state_of(node)

    # --- write ---

    def serialize(self) -> List[Dict[str, Any]]:
        """Working copy as replacement records; undecodable paths are dropped."""
        decoded, invalid = classify(sorted(self.working, key=str))
        for path in invalid:
            logger.warning('Dropping undecodable resource path %r for user %s', path, self.user_id)
        self.skipped_paths = invalid
        return [{'userId': self.user_id, 'resourceType': d.tier.value, 'resourcePath': d.path} for d in decoded]

    def save(self) -> bool:
        """Submit the whole working copy as a full replacement.

        Returns True on success (panel closes, table refreshed from the
        store). On failure the panel stays open with the working copy intact
        and a SaveFailed carrying the store's message is recorded.
        """
        self._require_open()
        if self.saving:
            return False
        self.saving = True
        try:
            records = self.serialize()
            try:
                self.store.replace_grants(self.user_id, records)
            except Exception as e:
                self._fail(SaveFailed(_failure_message(e, 'failed to save permissions')), e)
                return False
            logger.info('Saved %d resource permissions for user %s', len(records), self.user_id)
            self.is_open = False
            self.working = set()
            self.refresh()
            return True
        finally:
            self.saving = False

    def cancel(self):
        self.is_open = False
        self.working = set()

    # --- audit view ---

    def audit_rows(self) -> List[Dict[str, Any]]:
        """Grant table rows annotated with their decoded tier, invalid ones flagged."""
        decoded, _ = classify(g.get('resourcePath') for g in self.grants)
        by_path = {d.path: d for d in decoded}
        rows = []
        for g in self.grants:
            row = dict(g)
            d = by_path.get(g.get('resourcePath'))
            if d is None:
                row.update(valid=False, tier=None, resourceId=None)
            else:
                row.update(valid=True, tier=d.tier.value, resourceId=d.id)
            rows.append(row)
        return rows


__all__ = ['PermissionPanel', 'DEFAULT_PAGE_SIZE']
