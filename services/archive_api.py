"""Minimal REST client for the SIGDMUS archive API."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import requests

from core.settings import API, OFFLINE_SYNC


class ApiError(RuntimeError):
    """Raised when the archive API rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ArchiveApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        endpoints: Optional[Mapping[str, str]] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = API.request_timeout,
    ) -> None:
        self.base_url = (base_url or API.base_url()).rstrip("/")
        self.endpoints = dict(endpoints or OFFLINE_SYNC.endpoints)
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    def url_for(self, resource: str, record_id: Any = None) -> str:
        endpoint = self.endpoints.get(resource)
        if not endpoint:
            raise ApiError(f"Unknown resource: {resource}")
        url = f"{self.base_url}/{endpoint.strip('/')}"
        if record_id is not None:
            url = f"{url}/{record_id}"
        return url

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, url: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            response = self.session.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(f"{method} {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise ApiError(
                f"{method} {url} returned {response.status_code}",
                status=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # CRUD helpers
    def create(self, resource: str, body: Mapping[str, Any]) -> Any:
        return self._request("POST", self.url_for(resource), body)

    def update(self, resource: str, record_id: Any, body: Mapping[str, Any]) -> Any:
        return self._request("PUT", self.url_for(resource, record_id), body)

    def delete(self, resource: str, record_id: Any) -> Any:
        return self._request("DELETE", self.url_for(resource, record_id))

    def download(self, url: str) -> bytes:
        target = url if url.startswith(("http://", "https://")) else f"{self.base_url}/{url.lstrip('/')}"
        try:
            response = self.session.get(target, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"GET {target} failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise ApiError(f"GET {target} returned {response.status_code}", status=response.status_code)
        return response.content


__all__ = ["ApiError", "ArchiveApiClient"]
