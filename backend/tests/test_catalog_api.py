from tests.test_utils_seed import ensure_catalog, seed_user_with_role, login_headers

TREE = {
    'CAT-BD-1': [('CAT-GZW-1', ['CAT-S-1', 'CAT-S-2']), ('CAT-GZW-2', [])],
    'CAT-BD-2': [('CAT-GZW-3', ['CAT-S-3'])],
}


def _headers(client):
    seed_user_with_role('catalog_reader', 'CatalogReaderRole', ['ADMIN.CATALOG.READ', 'ADMIN.USER.READ'])
    return login_headers(client, 'catalog_reader')


def _all_bid_sections(client, headers):
    out, page = [], 1
    while True:
        body = client.get(f'/api/admin/bd-gd/list?pageNum={page}&pageSize=100', headers=headers).get_json()
        out.extend(body['data'])
        if len(out) >= body['pagination']['total']:
            return out
        page += 1


def test_bd_gd_list_returns_nested_tree(client):
    ensure_catalog(TREE)
    headers = _headers(client)
    records = {r['bdId']: r for r in _all_bid_sections(client, headers)}
    bd1 = records['CAT-BD-1']
    assert [w['gzwId'] for w in bd1['workFaces']] == ['CAT-GZW-1', 'CAT-GZW-2']
    assert [s['siteId'] for s in bd1['workFaces'][0]['sites']] == ['CAT-S-1', 'CAT-S-2']
    assert bd1['workFaces'][1]['sites'] == []
    assert bd1['bdStartKilo'] == 'DK0+000'


def test_bd_gd_list_pagination_meta(client):
    ensure_catalog(TREE)
    headers = _headers(client)
    resp = client.get('/api/admin/bd-gd/list?pageNum=1&pageSize=1', headers=headers)
    assert resp.status_code == 200
    meta = resp.get_json()['pagination']
    assert meta['pageNum'] == 1 and meta['pageSize'] == 1 and meta['returned'] == 1
    assert meta['total'] >= 2
    # pageSize clamps to the maximum instead of failing
    big = client.get('/api/admin/bd-gd/list?pageSize=100000', headers=headers).get_json()
    assert big['pagination']['pageSize'] == 100
    bad = client.get('/api/admin/bd-gd/list?pageNum=abc', headers=headers)
    assert bad.status_code == 400


def test_bd_gd_list_etag_conditional(client):
    ensure_catalog(TREE)
    headers = _headers(client)
    first = client.get('/api/admin/bd-gd/list?pageSize=50', headers=headers)
    etag = first.headers.get('ETag')
    assert etag
    second = client.get('/api/admin/bd-gd/list?pageSize=50', headers={**headers, 'If-None-Match': etag})
    assert second.status_code == 304
    assert second.headers.get('ETag') == etag
    ensure_catalog({'CAT-BD-1': [('CAT-GZW-1', ['CAT-S-NEW'])]})
    third = client.get('/api/admin/bd-gd/list?pageSize=50', headers={**headers, 'If-None-Match': etag})
    assert third.status_code == 200


def test_flat_site_list(client):
    ensure_catalog(TREE)
    headers = _headers(client)
    body = client.get('/api/admin/gd/list?pageSize=100', headers=headers).get_json()
    site_ids = {s['siteId'] for s in body['data']}
    assert {'CAT-S-1', 'CAT-S-2', 'CAT-S-3'} <= site_ids
    assert all('sitePk' in s and 'siteName' in s for s in body['data'])


def test_user_list_for_selection(client):
    headers = _headers(client)
    body = client.get('/api/admin/user/list?pageSize=100', headers=headers).get_json()
    assert any(u['userAccount'] == 'catalog_reader' for u in body['data'])
    assert all('password_hash' not in u for u in body['data'])


def test_catalog_requires_permission(client):
    seed_user_with_role('catalog_nobody', 'CatalogNobodyRole', ['ADMIN.PERMISSION.READ'])
    headers = login_headers(client, 'catalog_nobody')
    resp = client.get('/api/admin/bd-gd/list', headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()['error']['status'] == 403
