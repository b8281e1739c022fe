"""
Gridly API Client

Thin wrapper around the Gridly v1 REST API. Every call carries the
``Authorization: ApiKey <key>`` header; every failure is mapped to
GridlyAPIError in one place (GridlyClient._request).
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from gridly_sync import config
from gridly_sync.gridly.exceptions import ConfigurationError, GridlyAPIError
from gridly_sync.logger import get_logger

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', 120.0),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 120.0
    return httpx.Timeout(connect=10.0, write=60.0, read=timeout_value, pool=10.0)


def extract_error_message(status_code: Optional[int], body: Any) -> str:
    """
    Build a human message from an error response body.

    Order: ``message`` field, ``error`` field, string body, ``errors`` array
    joined with ", ", else a generic status + JSON fallback.
    """
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    if isinstance(body, str) and body:
        return body
    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        return ", ".join(
            str(item.get("message") or item) if isinstance(item, dict) else str(item)
            for item in body["errors"]
        )
    return f"Gridly API Error ({status_code}): {json.dumps(body)}"


class GridlyClient:
    """Client bound to one view of a Gridly database."""

    def __init__(self, api_key: str, view_id: str, base_url: str = None,
                 timeout: Any = None, transport: httpx.BaseTransport = None):
        if not api_key:
            raise ConfigurationError("Gridly API key is not configured", code="MISSING_API_KEY")
        if not view_id:
            raise ConfigurationError("Gridly view ID is not configured", code="MISSING_VIEW_ID")

        self.api_key = api_key
        self.view_id = view_id
        self.base_url = (base_url or config.GRIDLY_API_BASE_URL).rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"ApiKey {api_key}",
                "Content-Type": "application/json",
            },
            timeout=get_httpx_timeout(timeout if timeout is not None else config.HTTP_TIMEOUT),
            transport=transport,
        )

    @classmethod
    def from_grid_config(cls, grid_config: Optional[Dict[str, Any]], **kwargs) -> "GridlyClient":
        """Build a client from a stored grid configuration row."""
        if not grid_config:
            raise ConfigurationError("No Gridly configuration available", code="MISSING_GRID_CONFIG")
        return cls(grid_config.get("api_key"), grid_config.get("view_id"), **kwargs)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"/v1/views/{self.view_id}{path}"
        logger.debug(f"Gridly {method} {url}")
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                body = e.response.json()
            except ValueError:
                body = e.response.text
            message = extract_error_message(status_code, body)
            logger.error(f"Gridly API error ({status_code}) on {method} {url}: {message}")
            raise GridlyAPIError(message, status_code=status_code, details=body) from e
        except httpx.HTTPError as e:
            logger.error(f"Gridly request failed on {method} {url}: {e}")
            raise GridlyAPIError(str(e) or e.__class__.__name__, details=str(e)) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # ------------------------------------------------------------------
    # View and columns
    # ------------------------------------------------------------------

    def get_view(self) -> Dict[str, Any]:
        return self._request("GET", "") or {}

    def get_columns(self) -> List[Dict[str, Any]]:
        return self.get_view().get("columns") or []

    def create_column(self, column: Dict[str, Any]) -> Any:
        return self._request("POST", "/columns", json=column)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list_records(self, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        return self._request("GET", "/records", params={"limit": limit, "offset": offset}) or []

    def create_records(self, records: List[Dict[str, Any]]) -> Any:
        return self._request("POST", "/records", json=records)

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def get_dependencies(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/dependencies") or []

    def create_dependency(self, source_column_id: str, target_column_id: str) -> Any:
        return self._request(
            "POST",
            "/dependencies",
            json={"sourceColumnId": source_column_id, "targetColumnId": target_column_id},
        )


def create_client(grid_config: Optional[Dict[str, Any]], transport: httpx.BaseTransport = None) -> GridlyClient:
    """Default client factory: a GridlyClient using the stored Gridly settings."""
    settings = config.get_gridly_settings()
    return GridlyClient.from_grid_config(
        grid_config,
        base_url=settings.get("api_base_url"),
        timeout=settings.get("timeout"),
        transport=transport,
    )
