# foodexpress/services/catalog_client.py
from dataclasses import dataclass
from decimal import Decimal

import requests

from foodexpress.domain.errors import CatalogUnavailable, ItemNotFound
from foodexpress.utils.retry import http_retry
from foodexpress.utils.settings import CATALOG_SERVICE_URL, CATALOG_TIMEOUT_SECONDS
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    price: Decimal
    available: bool
    restaurant_id: int | None = None


class CatalogReader:
    """Read-only source of truth for item name, price and availability."""

    def resolve_item(self, item_id: int) -> CatalogItem:
        raise NotImplementedError


class CatalogClient(CatalogReader):
    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or CATALOG_SERVICE_URL).rstrip("/")
        self.timeout = timeout or CATALOG_TIMEOUT_SECONDS

    @http_retry()
    def _get(self, url: str) -> requests.Response:
        logger.info(f"CatalogClient GET {url}")
        resp = requests.get(url, timeout=self.timeout)
        # 404 to odpowiedz, nie blad sieci - bez retry
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def resolve_item(self, item_id: int) -> CatalogItem:
        try:
            resp = self._get(f"{self.base_url}/items/{item_id}")
        except requests.RequestException as e:
            logger.error(f"Catalog unreachable for item {item_id}: {e}")
            raise CatalogUnavailable(f"Menu service unavailable: {e}") from e
        if resp.status_code == 404:
            raise ItemNotFound(item_id)

        data = resp.json()
        return CatalogItem(
            id=int(data["id"]),
            name=data["name"],
            price=Decimal(str(data["price"])),
            available=bool(data.get("available", True)),
            restaurant_id=data.get("restaurant_id"),
        )
