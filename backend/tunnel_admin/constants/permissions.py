"""Central enum-like definitions to avoid typos in permission/service strings.
Extend cautiously; never rename codes silently, since role rows reference them by code.
"""
from __future__ import annotations
from typing import List, Dict

SERVICES = ['ADMIN']

SERVICE_ACTIONS = {
    'ADMIN': ['USER.READ', 'CATALOG.READ', 'PERMISSION.READ', 'PERMISSION.MANAGE'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    # Auditor can inspect the catalog and everyone's site grants but not change them
    'Auditor': ['ADMIN.USER.READ', 'ADMIN.CATALOG.READ', 'ADMIN.PERMISSION.READ'],
    'Administrator': ['*'],
}
