# /clinic/client.py
"""Python client for the clinic portal API.

Reads are cached by endpoint path. A successful mutation drops every cached
read it may have changed, so the next read goes back to the server; the cache
never holds anything the server did not return.
"""
from typing import Any, Dict, Iterable, Optional

import requests

CSRF_COOKIE = 'csrf_access_token'
CSRF_HEADER = 'X-CSRF-TOKEN'
ADMIN_PREFIX = '/api/admin'

# Session changes make every cached read stale
SESSION_PATHS = frozenset({'/api/login', '/api/logout', '/api/register'})

# Reads built from other resources
DEPENDENT_KEYS = {
    '/api/appointments': ('/api/medical-records/export',),
    '/api/medications': ('/api/medical-records/export',),
}


class ApiError(Exception):
    """Raised for any non-2xx response."""
    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class QueryCache:
    """JSON responses keyed by request path (query string included)."""
    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def keys(self):
        return list(self._entries)

    def get(self, key, default=None):
        return self._entries.get(key, default)

    def set(self, key, value):
        self._entries[key] = value

    def invalidate(self, prefix: str) -> int:
        """Drops ``prefix`` and every key below it. Returns how many keys went."""
        stale = [key for key in self._entries if _under(key, prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self):
        self._entries.clear()


def _under(key, prefix):
    return key == prefix or key.startswith(prefix + '/') or key.startswith(prefix + '?')


def resource_root(path: str) -> str:
    """``/api/appointments/4/cancel`` -> ``/api/appointments``; admin paths keep their namespace."""
    parts = [p for p in path.split('?', 1)[0].split('/') if p]
    if len(parts) >= 3 and parts[0] == 'api' and parts[1] == 'admin':
        return '/' + '/'.join(parts[:3])
    return '/' + '/'.join(parts[:2])


def invalidation_prefixes(path: str) -> Iterable[str]:
    """Cached keys a successful mutation of ``path`` makes stale."""
    root = resource_root(path)
    prefixes = {root, ADMIN_PREFIX}
    if root.startswith(ADMIN_PREFIX + '/'):
        # Admin edits show up in the owner's own listing too
        prefixes.add('/api/' + root[len(ADMIN_PREFIX) + 1:])
    for base in list(prefixes):
        prefixes.update(DEPENDENT_KEYS.get(base, ()))
    return sorted(prefixes)


class ClinicClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.cache = QueryCache()

    def _request(self, method, path, json=None):
        headers = {}
        if method != 'GET':
            csrf_token = self.session.cookies.get(CSRF_COOKIE)
            if csrf_token:
                headers[CSRF_HEADER] = csrf_token

        response = self.session.request(
            method, f"{self.base_url}{path}", json=json, headers=headers, timeout=self.timeout
        )
        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, _error_message(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, refresh: bool = False):
        if not refresh and path in self.cache:
            return self.cache.get(path)
        data = self._request('GET', path)
        self.cache.set(path, data)
        return data

    def _mutate(self, method, path, json=None):
        data = self._request(method, path, json=json)
        if path.split('?', 1)[0] in SESSION_PATHS:
            self.cache.clear()
        else:
            for prefix in invalidation_prefixes(path):
                self.cache.invalidate(prefix)
        return data

    def post(self, path: str, json=None):
        return self._mutate('POST', path, json=json)

    def put(self, path: str, json=None):
        return self._mutate('PUT', path, json=json)

    def delete(self, path: str, json=None):
        return self._mutate('DELETE', path, json=json)

    # --- Session helpers ---

    def login(self, username: str, password: str):
        return self.post('/api/login', json={'username': username, 'password': password})

    def logout(self):
        return self.post('/api/logout')

    def current_user(self):
        return self.get('/api/user')


def _error_message(response):
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or 'Request failed'
    if isinstance(body, dict):
        return body.get('error') or body.get('msg') or body.get('message') or 'Request failed'
    return str(body)
