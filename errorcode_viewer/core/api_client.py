"""
REST client for the error code service.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

import requests

from .exceptions import SourceUnavailableError
from .filter_manager import build_search_params
from .models import ErrorRecord, QueryState

logger = logging.getLogger(__name__)


class ErrorCodeClient:
    """
    Thin wrapper over the error code REST API.

    Every failure (connection error, timeout, non-2xx status, body that is
    not JSON) surfaces as SourceUnavailableError. Records come back in the
    order the server sent them.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return its decoded JSON body."""
        url = self._url(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise SourceUnavailableError(f"Cannot reach {url}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            try:
                data = response.json()
                detail = data.get("error", response.text) if isinstance(data, dict) else response.text
            except ValueError:
                detail = response.text
            logger.error("%s %s returned %s: %s", method, url, response.status_code, detail)
            raise SourceUnavailableError(f"HTTP {response.status_code}: {detail}")

        try:
            return response.json()
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise SourceUnavailableError(f"Invalid JSON response from {url}") from exc

    def _records(self, data: Any) -> list[ErrorRecord]:
        if not isinstance(data, list):
            raise SourceUnavailableError("Expected a list of error codes from the server")
        return [ErrorRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def list_all(self) -> list[ErrorRecord]:
        """Fetch every error code."""
        return self._records(self._request("GET", "/errorcodes"))

    def search(self, query: QueryState) -> list[ErrorRecord]:
        """Server-side search by brand/model/errorCode and free text."""
        params = build_search_params(query)
        logger.debug("Searching error codes with %s", params)
        return self._records(self._request("GET", "/errorcodes/search", params=params))

    def get(self, record_id: Union[int, str]) -> ErrorRecord:
        data = self._request("GET", f"/errorcodes/{record_id}")
        return ErrorRecord.from_dict(data)

    def create(self, record: ErrorRecord) -> ErrorRecord:
        data = self._request("POST", "/errorcodes", json=record.to_payload())
        logger.info("Created error code %s/%s", record.brand, record.error_code)
        return ErrorRecord.from_dict(data)

    def update(self, record_id: Union[int, str], record: ErrorRecord) -> ErrorRecord:
        data = self._request("PUT", f"/errorcodes/{record_id}", json=record.to_payload())
        logger.info("Updated error code %s", record_id)
        return ErrorRecord.from_dict(data)

    def delete(self, record_id: Union[int, str]) -> dict[str, Any]:
        data = self._request("DELETE", f"/errorcodes/{record_id}")
        logger.info("Deleted error code %s", record_id)
        return data

    def stats(self) -> dict[str, Any]:
        """Aggregate counts as computed by the server."""
        return self._request("GET", "/stats")

    def init_database(self) -> dict[str, Any]:
        """Reset the server's collection to its sample data."""
        return self._request("POST", "/init")
