from __future__ import annotations
"""Exception types shared by the permission engine, the panel and the API client.

HTTP handlers keep using ``abort(...)``; these classes cover code that runs
outside a request (the panel controller and its collaborators).
"""
from typing import Optional


class InvalidPathFormat(ValueError):
    """A resource path does not start with a known tier prefix."""

    def __init__(self, path):
        self.path = path
        super().__init__(f'Invalid resource path: {path!r}')


class AdminApiError(Exception):
    """Non-2xx response (or transport failure) from the admin API."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class PanelStateError(RuntimeError):
    """Operation not allowed in the panel's current state (e.g. toggle while closed)."""


class PanelError(Exception):
    """User-visible outcome of a failed panel operation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CatalogUnavailable(PanelError):
    pass


class GrantLoadFailed(PanelError):
    pass


class SaveFailed(PanelError):
    pass


__all__ = [
    'InvalidPathFormat', 'AdminApiError', 'PanelStateError', 'PanelError',
    'CatalogUnavailable', 'GrantLoadFailed', 'SaveFailed',
]
