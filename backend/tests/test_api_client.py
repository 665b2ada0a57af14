import pytest
import requests

from tunnel_admin.errors import AdminApiError, SaveFailed
from tunnel_admin.services.api_client import AdminApiClient
from tunnel_admin.services.permission_panel import PermissionPanel
from tunnel_admin.services.selection import TriState
from tests.test_utils_seed import ADMIN_PERMS, ensure_catalog, ensure_user, seed_user_with_role


class _Response:
    def __init__(self, flask_resp):
        self.status_code = flask_resp.status_code
        self._body = flask_resp.get_json(silent=True)

    def json(self):
        if self._body is None:
            raise ValueError('no JSON body')
        return self._body


class FlaskBridgeSession:
    """Stands in for requests.Session, routing calls to the Flask test client."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, params=None, json=None):
        path = url.replace('http://admin.test', '', 1)
        self.calls.append((method, path, timeout))
        resp = self.client.open(path, method=method, query_string=params, json=json, headers=headers or {})
        return _Response(resp)


class BrokenSession:
    def request(self, *a, **k):
        raise requests.ConnectionError('connection refused')


@pytest.fixture()
def api(client):
    seed_user_with_role('bridge_admin', 'BridgeAdminRole', ADMIN_PERMS)
    api = AdminApiClient('http://admin.test/', timeout=3, session=FlaskBridgeSession(client))
    api.login('bridge_admin', 'pw')
    return api


def test_login_sets_bearer_token(api):
    assert api.token
    assert api.base_url == 'http://admin.test'
    assert any(u['userAccount'] == 'bridge_admin' for u in api.list_users())
    assert all(timeout == 3 for _, _, timeout in api.session.calls)


def test_panel_round_trip_over_http(api):
    ensure_catalog({
        'BRIDGE-BD': [('BRIDGE-GZW-1', ['BRIDGE-S-1', 'BRIDGE-S-2']), ('BRIDGE-GZW-2', ['BRIDGE-S-3'])],
    })
    target = ensure_user('bridge_target')
    api.replace_grants(target.id, [{'userId': target.id, 'resourceType': 'site', 'resourcePath': '/site/BRIDGE-S-3'}])

    panel = PermissionPanel(api, api, page_size=1)
    states = panel.open(target.id).as_dict()
    assert panel.errors == []
    assert states['/gzw/BRIDGE-GZW-2'] is TriState.CHECKED
    assert states['/bd/BRIDGE-BD'] is TriState.INDETERMINATE

    panel.toggle_path('/gzw/BRIDGE-GZW-1', True)
    panel.toggle_path('/site/BRIDGE-S-3', False)
    assert panel.save() is True
    saved = {g['resourcePath'] for g in api.get_grants(target.id)}
    assert saved == {'/gzw/BRIDGE-GZW-1', '/site/BRIDGE-S-1', '/site/BRIDGE-S-2'}
    assert {g['resourcePath'] for g in panel.grants} == saved


def test_server_rejection_message_reaches_panel(api):
    target = ensure_user('bridge_target_bad')
    panel = PermissionPanel(api, api)
    panel.open(target.id)
    # send a record the server refuses: declared tier disagrees with the path
    panel.serialize = lambda: [
        {'userId': target.id, 'resourceType': 'bd', 'resourcePath': '/site/x'},
    ]
    assert panel.save() is False
    assert isinstance(panel.last_error, SaveFailed)
    assert 'resourceType' in panel.last_error.message
    assert panel.is_open


def test_error_detail_is_passed_through(api):
    with pytest.raises(AdminApiError) as exc:
        api.get_grants(987654)
    assert exc.value.status == 404
    assert exc.value.message == 'user not found'


def test_missing_token_uses_jwt_message(client):
    anon = AdminApiClient('http://admin.test', session=FlaskBridgeSession(client))
    with pytest.raises(AdminApiError) as exc:
        anon.list_bid_sections(1, 10)
    assert exc.value.status == 401
    assert exc.value.message


def test_transport_failure_becomes_api_error():
    api = AdminApiClient('http://admin.test', token='t', session=BrokenSession())
    with pytest.raises(AdminApiError) as exc:
        api.get_grants(1)
    assert exc.value.status is None
    assert 'connection refused' in exc.value.message


def test_from_env(monkeypatch):
    monkeypatch.setenv('ADMIN_API_URL', 'http://elsewhere:8080/')
    monkeypatch.setenv('ADMIN_API_TIMEOUT', '2.5')
    api = AdminApiClient.from_env(token='abc')
    assert api.base_url == 'http://elsewhere:8080'
    assert api.timeout == 2.5
    assert api.token == 'abc'


class HtmlSession:
    """Answers every call with a 200 HTML page, as a misrouted proxy would."""

    class _Page:
        status_code = 200

        def json(self):
            raise ValueError('Expecting value')

    def request(self, *a, **k):
        return self._Page()


def test_non_json_success_body_becomes_api_error():
    api = AdminApiClient('http://admin.test', token='t', session=HtmlSession())
    with pytest.raises(AdminApiError) as exc:
        api.list_bid_sections(1, 10)
    assert exc.value.status == 200
    assert exc.value.message == 'invalid JSON response'
    panel = PermissionPanel(api, api)
    panel.open(1)
    assert [type(e).__name__ for e in panel.errors] == ['CatalogUnavailable', 'GrantLoadFailed']
    assert panel.errors[0].message == 'invalid JSON response'
