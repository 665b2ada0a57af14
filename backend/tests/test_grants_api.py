from tunnel_admin import get_db
from tunnel_admin.models.audit import AuditLog
from tunnel_admin.models.grants import UserResourcePermission
from tests.test_utils_seed import ADMIN_PERMS, ensure_user, seed_user_with_role, login_headers


def _admin_headers(client):
    seed_user_with_role('grants_admin', 'GrantsAdminRole', ADMIN_PERMS)
    return login_headers(client, 'grants_admin')


def test_replace_then_get_returns_exact_set(client):
    headers = _admin_headers(client)
    target = ensure_user('grants_target_1')
    url = f'/api/admin/user/{target.id}/bd-gd/permission'

    first = [
        {'userPk': target.id, 'resourceType': 'bd', 'resourcePath': '/bd/BD-1'},
        {'userPk': target.id, 'resourceType': 'gzw', 'resourcePath': '/gzw/G-1'},
        {'userPk': target.id, 'resourceType': 'site', 'resourcePath': '/site/S-1'},
        {'userPk': target.id, 'resourceType': 'site', 'resourcePath': '/site/S-2'},
    ]
    resp = client.post(url, json=first, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    assert {g['resourcePath'] for g in resp.get_json()['data']} == {r['resourcePath'] for r in first}

    # second save fully replaces the first, no diff semantics
    second = [{'resourceType': 'site', 'resourcePath': '/site/S-2'}, {'resourcePath': '/site/S-3'}]
    assert client.post(url, json=second, headers=headers).status_code == 200
    body = client.get(url, headers=headers).get_json()
    assert sorted((g['resourceType'], g['resourcePath']) for g in body['data']) == [('site', '/site/S-2'), ('site', '/site/S-3')]
    assert all(g['userId'] == target.id and g['grantedAt'] for g in body['data'])

    assert client.post(url, json=[], headers=headers).status_code == 200
    assert client.get(url, headers=headers).get_json()['data'] == []


def test_duplicate_paths_are_collapsed(client):
    headers = _admin_headers(client)
    target = ensure_user('grants_target_dup')
    url = f'/api/admin/user/{target.id}/bd-gd/permission'
    resp = client.post(url, json=[{'resourcePath': '/site/X'}, {'resourcePath': '/site/X'}], headers=headers)
    assert resp.status_code == 200
    assert [g['resourcePath'] for g in resp.get_json()['data']] == ['/site/X']


def test_invalid_records_are_rejected_and_store_untouched(client):
    headers = _admin_headers(client)
    target = ensure_user('grants_target_2')
    url = f'/api/admin/user/{target.id}/bd-gd/permission'
    assert client.post(url, json=[{'resourcePath': '/site/keep'}], headers=headers).status_code == 200

    bad_bodies = [
        [{'resourceType': 'site', 'resourcePath': '/legacy/1'}],
        [{'resourceType': 'bd', 'resourcePath': '/site/S-1'}],
        [{'resourcePath': '/site/'}],
        ['/site/S-1'],
        {'resourcePath': '/site/S-1'},
        [{'userPk': target.id + 1000, 'resourcePath': '/site/S-1'}],
    ]
    for body in bad_bodies:
        resp = client.post(url, json=body, headers=headers)
        assert resp.status_code == 400, body
        assert resp.get_json()['error']['detail']
    assert [g['resourcePath'] for g in client.get(url, headers=headers).get_json()['data']] == ['/site/keep']


def test_unknown_user_is_404(client):
    headers = _admin_headers(client)
    assert client.get('/api/admin/user/999999/bd-gd/permission', headers=headers).status_code == 404
    assert client.post('/api/admin/user/999999/bd-gd/permission', json=[], headers=headers).status_code == 404


def test_replace_is_audited(client):
    headers = _admin_headers(client)
    target = ensure_user('grants_target_audit')
    url = f'/api/admin/user/{target.id}/bd-gd/permission'
    client.post(url, json=[{'resourcePath': '/site/A'}, {'resourcePath': '/gzw/B'}], headers=headers)
    session = get_db()
    log = session.query(AuditLog).filter_by(action='USER.GRANTS.REPLACE', entity_id=str(target.id)).order_by(AuditLog.id.desc()).first()
    assert log is not None
    assert log.meta == {'count': 2}
    assert 'ADMIN.PERMISSION.MANAGE' in log.perms_snapshot['perms']


def test_rejected_replace_is_not_audited(client):
    headers = _admin_headers(client)
    target = ensure_user('grants_target_noaudit')
    client.post(f'/api/admin/user/{target.id}/bd-gd/permission', json=[{'resourcePath': 'nope'}], headers=headers)
    session = get_db()
    assert session.query(AuditLog).filter_by(action='USER.GRANTS.REPLACE', entity_id=str(target.id)).count() == 0


def test_read_only_role_cannot_replace(client):
    seed_user_with_role('grants_auditor', 'GrantsAuditorRole', ['ADMIN.PERMISSION.READ'])
    headers = login_headers(client, 'grants_auditor')
    target = ensure_user('grants_target_3')
    url = f'/api/admin/user/{target.id}/bd-gd/permission'
    assert client.get(url, headers=headers).status_code == 200
    resp = client.post(url, json=[{'resourcePath': '/site/S'}], headers=headers)
    assert resp.status_code == 403
    assert get_db().query(UserResourcePermission).filter_by(user_id=target.id).count() == 0


def test_missing_token_is_401(client):
    assert client.get('/api/admin/user/1/bd-gd/permission').status_code == 401
