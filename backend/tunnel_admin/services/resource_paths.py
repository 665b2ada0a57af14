from __future__ import annotations
"""Resource path codec for the bid-section / work-face / site hierarchy.

Grammar (shared with the permission store, must stay bit-exact):

    ResourcePath := "/bd/" BidSectionId | "/gzw/" WorkFaceId | "/site/" SiteId

Ids are opaque catalog strings and are not escaped; an id containing ``/``
is a caller error and is not checked here.
"""
from enum import Enum
from typing import Iterable, List, NamedTuple, Tuple

from tunnel_admin.errors import InvalidPathFormat


class Tier(str, Enum):
    BID_SECTION = 'bd'
    WORK_FACE = 'gzw'
    SITE = 'site'

    @property
    def prefix(self) -> str:
        return f'/{self.value}/'


# Longest prefix first so decode never matches a shorter prefix of a longer one
_PREFIXES = sorted(((t.prefix, t) for t in Tier), key=lambda item: len(item[0]), reverse=True)


class DecodedPath(NamedTuple):
    tier: Tier
    id: str
    path: str


def encode(tier: Tier, resource_id: str) -> str:
    return Tier(tier).prefix + resource_id


def decode(path: str) -> Tuple[Tier, str]:
    """Return ``(tier, id)`` for a resource path or raise InvalidPathFormat."""
    if not isinstance(path, str):
        raise InvalidPathFormat(path)
    for prefix, tier in _PREFIXES:
        if path.startswith(prefix):
            resource_id = path[len(prefix):]
            if not resource_id:
                raise InvalidPathFormat(path)
            return tier, resource_id
    raise InvalidPathFormat(path)


def resource_type(path: str) -> str:
    """Wire ``resourceType`` value for a path ('bd', 'gzw' or 'site')."""
    return decode(path)[0].value


def is_valid(path) -> bool:
    try:
        decode(path)
    except InvalidPathFormat:
        return False
    return True


def classify(paths: Iterable[str]) -> Tuple[List[DecodedPath], List[str]]:
    """Split paths into decoded entries and raw entries that failed to decode."""
    decoded: List[DecodedPath] = []
    invalid: List[str] = []
    for p in paths:
        try:
            tier, rid = decode(p)
        except InvalidPathFormat:
            invalid.append(p)
            continue
        decoded.append(DecodedPath(tier, rid, p))
    return decoded, invalid


def site_path(site_id: str) -> str:
    return encode(Tier.SITE, site_id)


__all__ = ['Tier', 'DecodedPath', 'encode', 'decode', 'resource_type', 'is_valid', 'classify', 'site_path']
