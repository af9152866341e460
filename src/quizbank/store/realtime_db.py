"""
Module: store.realtime_db

Purpose:
    Firebase Realtime Database store over its REST API. Each record is
    a JSON node at ``<database_url>/<collection>/<id>.json``.

Key Classes:
    - RealtimeDatabaseStore: REST-backed QuestionStore

Dependencies:
    - requests: HTTP transport
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .base import QuestionStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RealtimeDatabaseStore(QuestionStore):
    """
    QuestionStore backed by a Firebase Realtime Database.

    Attributes:
        database_url: Database root like "https://<project>.firebaseio.com".
        auth_token: Optional ID token or database secret sent as ``auth``.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        database_url: str,
        auth_token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        if not database_url:
            raise ValueError("database_url must not be empty")
        self.database_url = database_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self._session = session or requests.Session()

    def __repr__(self) -> str:
        return f"RealtimeDatabaseStore({self.database_url!r})"

    def _url(self, collection: str, key: Optional[str] = None) -> str:
        path = collection if key is None else f"{collection}/{quote(key, safe='')}"
        return f"{self.database_url}/{path}.json"

    def _request(self, method: str, url: str, **kwargs) -> Any:
        params = {"auth": self.auth_token} if self.auth_token else None
        try:
            response = self._session.request(
                method, url, params=params, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"{method} {url} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {url} returned invalid JSON: {e}") from e

    def _read_collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        data = self._request("GET", self._url(collection))
        if isinstance(data, list):
            # The database returns arrays for collections with integer-like keys
            return {str(i): item for i, item in enumerate(data) if item is not None}
        return data or {}

    def _read_record(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return self._request("GET", self._url(collection, key))

    def _write_record(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        self._request("PUT", self._url(collection, key), json=record)

    def _delete_record(self, collection: str, key: str) -> None:
        self._request("DELETE", self._url(collection, key))
