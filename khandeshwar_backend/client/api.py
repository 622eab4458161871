import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

log = logging.getLogger(__name__)

OFFLINE_MESSAGE = "backend offline"
RETRY_STATUSES = (502, 503, 504)


class BackendOfflineError(Exception):
    def __init__(self, message=OFFLINE_MESSAGE):
        super().__init__(message)


class ApiRequestError(Exception):
    """Non-2xx answer from the service."""

    def __init__(self, status, error, details=None, payload=None):
        super().__init__(f"{status}: {error}")
        self.status = status
        self.error = error
        self.details = details or []
        self.payload = payload or {}

    @property
    def field_errors(self) -> dict:
        """``{path: message}`` for 422 responses."""
        return {d.get("path", ""): d.get("message", "") for d in self.details if isinstance(d, dict)}


class ApiClient:
    """
    Thin JSON client for the record service.

    GET requests are retried on connection errors and 502/503/504; writes
    are sent once. Every call carries the bearer token from ``session``.
    """

    def __init__(self, base_url, session=None, retries=3, backoff_factor=0.3, timeout=10, http=None):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.http = http or requests.Session()
        retry = Retry(
            total=retries,
            connect=retries,
            read=retries,
            status=retries,
            backoff_factor=backoff_factor,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.http.mount("http://", adapter)
        self.http.mount("https://", adapter)

    def _headers(self, extra=None):
        headers = {"Accept": "application/json"}
        if self.session is not None and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        headers.update(extra or {})
        return headers

    def request(self, method, path, json=None, params=None, headers=None, data=None, raw=False):
        url = f"{self.base_url}/api{path}"
        try:
            resp = self.http.request(
                method, url,
                json=json, params=params, data=data,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            log.warning("%s %s failed: %s", method, url, e)
            raise BackendOfflineError() from e

        if method == "GET" and resp.status_code in RETRY_STATUSES:
            raise BackendOfflineError()
        if resp.status_code >= 400:
            try:
                payload = resp.json()
            except ValueError:
                payload = {}
            raise ApiRequestError(
                resp.status_code,
                payload.get("error") or resp.reason or "Request failed",
                payload.get("details"),
                payload,
            )
        if raw:
            return resp
        return resp.json().get("data")

    def get(self, path, params=None, **kw):
        return self.request("GET", path, params=params, **kw)

    def post(self, path, json=None, **kw):
        return self.request("POST", path, json=json, **kw)

    def put(self, path, json=None, **kw):
        return self.request("PUT", path, json=json, **kw)

    def patch(self, path, json=None, **kw):
        return self.request("PATCH", path, json=json, **kw)

    def delete(self, path, **kw):
        return self.request("DELETE", path, **kw)
