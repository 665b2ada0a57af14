from __future__ import annotations
from typing import Any, Tuple
from flask import request, abort, make_response
from tunnel_admin.config.pagination import normalize_pagination
import hashlib
import json


def page_args() -> Tuple[int, int]:
    try:
        return normalize_pagination(request.args.get('pageNum'), request.args.get('pageSize'))
    except ValueError as e:
        abort(400, description=str(e))


def compute_etag(rows: Any, total: int, page_num: int, page_size: int) -> str:
    # Content based: catalog rows carry no single reliable modification stamp
    seed = f"{json.dumps(rows, sort_keys=True, default=str)}|{total}|{page_num}|{page_size}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, page_num: int, page_size: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'pageNum': page_num,
            'pageSize': page_size,
            'returned': len(rows)
        }
    }


def make_cached_list_response(rows: list, total: int, page_num: int, page_size: int):
    etag = compute_etag(rows, total, page_num, page_size)
    resp = make_response(build_list_payload(rows, total, page_num, page_size))
    resp.headers['ETag'] = etag
    return resp, etag


def handle_conditional(etag_value: str):
    """Return a 304 response when If-None-Match matches etag_value, else None."""
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag_value:
        resp = make_response('', 304)
        resp.headers['ETag'] = etag_value
        return resp
    return None
