from __future__ import annotations
"""HTTP client for the admin API.

Implements both collaborator interfaces the permission panel needs
(``list_bid_sections`` and ``get_grants``/``replace_grants``) so a panel can
run against a remote server. No retries: every failure surfaces as
AdminApiError with the server's error detail verbatim.
"""
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import requests

from tunnel_admin.errors import AdminApiError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class AdminApiClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls, token: Optional[str] = None) -> 'AdminApiClient':
        return cls(
            os.getenv('ADMIN_API_URL', 'http://localhost:5000'),
            token=token,
            timeout=float(os.getenv('ADMIN_API_TIMEOUT', str(DEFAULT_TIMEOUT))),
        )

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop('headers', {})
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        url = f'{self.base_url}{path}'
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning('%s %s failed: %s', method, url, e)
            raise AdminApiError(f'request failed: {e}') from e
        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400:
            raise AdminApiError(_error_message(body, resp.status_code), status=resp.status_code)
        if not isinstance(body, dict):
            raise AdminApiError('invalid JSON response', status=resp.status_code)
        return body

    def login(self, account: str, password: str) -> str:
        body = self._request('POST', '/auth/login', json={'account': account, 'password': password})
        self.token = body['access_token']
        return self.token

    def list_bid_sections(self, page: int, page_size: int) -> Tuple[List[Dict[str, Any]], int]:
        body = self._request('GET', '/api/admin/bd-gd/list', params={'pageNum': page, 'pageSize': page_size})
        return body.get('data') or [], body.get('pagination', {}).get('total', 0)

    def list_users(self, page: int = 1, page_size: int = 100) -> List[Dict[str, Any]]:
        body = self._request('GET', '/api/admin/user/list', params={'pageNum': page, 'pageSize': page_size})
        return body.get('data') or []

    def get_grants(self, user_id: int) -> List[Dict[str, Any]]:
        body = self._request('GET', f'/api/admin/user/{user_id}/bd-gd/permission')
        return body.get('data') or []

    def replace_grants(self, user_id: int, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        body = self._request('POST', f'/api/admin/user/{user_id}/bd-gd/permission', json=list(records))
        return body.get('data') or []


def _error_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        err = body.get('error')
        if isinstance(err, dict) and err.get('detail'):
            return str(err['detail'])
        # flask-jwt-extended reports auth failures as {"msg": ...}
        if body.get('msg'):
            return str(body['msg'])
        if body.get('message'):
            return str(body['message'])
    return f'HTTP {status}'


__all__ = ['AdminApiClient', 'DEFAULT_TIMEOUT']
