"""
Inventory service client.

Thin wrapper over the remote inventory API, which is the source of truth
for medications and restock orders. This client only moves data:

- every `requests` failure and unreadable body becomes TransportError
- every non-2xx status (or `success: false` body) becomes RemoteRejection
  carrying the service's own message

Only GETs are retried. POST/PATCH are never retried here because the
service is not idempotent for them; callers decide what a retry means.
"""
import logging
import time
from typing import Any, List, Optional

import requests
from pydantic import ValidationError as SchemaError

from medrestock.core.config import settings, build_api_url
from medrestock.core.exceptions import NotFoundError, RemoteRejection, TransportError
from medrestock.schemas.inventory import Medication, RestockOrder

logger = logging.getLogger(__name__)


class InventoryClient:
    """Blocking HTTP client. The workflow runs it in the default executor."""

    LOW_STOCK_PATH = "/api/low-stock"
    EXPIRING_PATH = "/api/expiring"
    RESTOCKS_PATH = "/api/restocks"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.INVENTORY_API_BASE_URL).rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_retries = settings.REQUEST_MAX_RETRIES if max_retries is None else max_retries
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_low_stock(self) -> List[Medication]:
        data = self._request("GET", self.LOW_STOCK_PATH)
        return self._parse_list(data, Medication, self.LOW_STOCK_PATH)

    def list_expiring(self) -> List[Medication]:
        data = self._request("GET", self.EXPIRING_PATH)
        return self._parse_list(data, Medication, self.EXPIRING_PATH)

    def list_restock_orders(self) -> List[RestockOrder]:
        data = self._request("GET", self.RESTOCKS_PATH)
        return self._parse_list(data, RestockOrder, self.RESTOCKS_PATH)

    # ------------------------------------------------------------------
    # Writes (never retried)
    # ------------------------------------------------------------------

    def create_restock_order(self, payload: dict) -> dict:
        return self._request("POST", self.RESTOCKS_PATH, json=payload, retry=False) or {}

    def update_restock_order(self, order_id, payload: dict) -> dict:
        path = f"{self.RESTOCKS_PATH}/{order_id}"
        return self._request("PATCH", path, json=payload, retry=False) or {}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse_list(self, data: Any, model, path: str) -> list:
        if not isinstance(data, list):
            raise TransportError(f"Expected a list from {path}")
        try:
            return [model.model_validate(item) for item in data]
        except SchemaError as e:
            raise TransportError(f"Malformed response from {path}", details=str(e))

    def _request(self, method: str, path: str, json: Optional[dict] = None, retry: bool = True) -> Any:
        url = build_api_url(path, self.base_url)
        attempts = (self.max_retries if retry else 0) + 1

        for attempt in range(attempts):
            try:
                response = self.session.request(method, url, json=json, timeout=self.timeout)
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < attempts - 1:
                    wait_time = 0.5 * (2 ** attempt)  # 0.5s, 1s, 2s...
                    logger.warning(
                        f"[InventoryClient] {method} {path} failed ({e.__class__.__name__}), "
                        f"retry {attempt + 1}/{attempts - 1} after {wait_time}s"
                    )
                    time.sleep(wait_time)
                    continue
                logger.error(f"[InventoryClient] {method} {path} unreachable: {e}")
                raise TransportError(f"Inventory service unreachable: {e}")
            except requests.RequestException as e:
                logger.error(f"[InventoryClient] {method} {path} failed: {e}")
                raise TransportError(f"Request to inventory service failed: {e}")

            return self._handle_response(method, path, response)

        raise TransportError(f"Inventory service unreachable: {method} {path}")

    def _handle_response(self, method: str, path: str, response: requests.Response) -> Any:
        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                if response.ok:
                    raise TransportError(f"Unreadable response from {path}")

        message = body.get("message") if isinstance(body, dict) else None

        if not response.ok:
            logger.warning(f"[InventoryClient] {method} {path} -> {response.status_code}: {message}")
            if response.status_code == 404:
                raise NotFoundError(message, status_code=404)
            raise RemoteRejection(message, status_code=response.status_code)

        if isinstance(body, dict) and body.get("success") is False:
            logger.warning(f"[InventoryClient] {method} {path} reported failure: {message}")
            raise RemoteRejection(message, status_code=response.status_code)

        logger.debug(f"[InventoryClient] {method} {path} -> {response.status_code}")
        return body

    def close(self):
        self.session.close()


# Singleton instance
_inventory_client: Optional[InventoryClient] = None


def get_inventory_client() -> InventoryClient:
    """Get or create the shared InventoryClient."""
    global _inventory_client
    if _inventory_client is None:
        _inventory_client = InventoryClient()
    return _inventory_client
