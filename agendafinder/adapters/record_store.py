"""
HTTP client for the PostgREST-style record store (Supabase REST API).
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import RecordStoreError

logger = logging.getLogger(__name__)


def eq(value: Any) -> str:
    return f"eq.{_literal(value)}"


def neq(value: Any) -> str:
    return f"neq.{_literal(value)}"


def in_(values) -> str:
    return "in.(" + ",".join(_literal(v) for v in values) + ")"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RecordStoreClient:
    """
    Client for the generic table store behind the assistant.

    Rows are addressed by table name plus PostgREST filters, e.g.
    ``{"attendant_id": "eq.42", "status": "neq.agendamento_cancelado"}``.
    Every method returns the list of affected rows.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the record store client.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service key sent as bearer token and apikey header
            timeout: Request timeout in seconds
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "apikey": api_key,
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, str]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        return self._request("GET", table, params=params)

    def insert(self, table: str, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._request("POST", table, payload=record)

    def update(self, table: str, changes: Dict[str, Any], filters: Dict[str, str]) -> List[Dict[str, Any]]:
        """Patch the given columns on every row matching ``filters``."""
        if not filters:
            raise ValueError("Refusing to update without filters")
        return self._request("PATCH", table, params=filters, payload=changes)

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("Record store %s %s failed (%s): %s", method, table, status, e)
            raise RecordStoreError(f"Record store request failed: {e}", status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error("Record store %s %s failed: %s", method, table, e)
            raise RecordStoreError(f"Record store unreachable: {e}") from e

        if not response.content:
            return []

        try:
            data = response.json()
        except ValueError as e:
            raise RecordStoreError(f"Could not decode record store response: {e}") from e

        if isinstance(data, dict):
            return [data]
        return data
