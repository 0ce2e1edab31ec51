"""HTTP adapter for the storefront's product catalogue service.

Resolves ``GET {base_url}/products/{product_id}``. A 404 means the product
does not exist; transport errors, timeouts, other non-2xx answers and
documents that do not describe a sellable product mean the catalogue is
unavailable.

One ``httpx.Client`` is held for the adapter's lifetime so connections are
pooled across lookups; ``close()`` releases it.
"""

from typing import Any

import httpx

from shopping.catalogue.port import ProductSnapshot, ProductSnapshotProvider
from shopping.exceptions import CatalogueUnavailable
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


def _first(payload: dict[str, Any], *keys, default=None):
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return default


def snapshot_from_payload(payload: dict[str, Any]) -> ProductSnapshot:
    """Build a snapshot from a catalogue document (camelCase or snake_case).

    Raises ``CatalogueUnavailable`` for a document with missing fields or
    with a negative price, discount price or stock level.
    """
    try:
        data = payload.get("data", payload)
        discount_price = _first(data, "discountPrice", "discount_price")
        thumbnail = _first(data, "thumbnail", default="")
        if not thumbnail and data.get("images"):
            first_image = data["images"][0]
            thumbnail = first_image.get("url", "") if isinstance(first_image, dict) else str(first_image)

        return ProductSnapshot(
            id=str(_first(data, "id", "_id")),
            name=data["name"],
            price=int(data["price"]),
            discount_price=int(discount_price) if discount_price else None,
            stock=int(data.get("stock", 0)),
            thumbnail=thumbnail,
            category=_first(data, "category"),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Rejected malformed catalogue document", error=str(exc))
        raise CatalogueUnavailable(f"Malformed catalogue document: {exc}") from exc


class HttpProductCatalogue(ProductSnapshotProvider):
    def __init__(self, base_url: str, timeout: float = 5.0, client: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        if not self._client.is_closed:
            self._client.close()

    def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        return self._client.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)

    def get_product(self, product_id: str) -> ProductSnapshot | None:
        try:
            response = self._get(f"products/{product_id}")
        except httpx.HTTPError as exc:
            logger.warning("Catalogue request failed", product_id=str(product_id), error=str(exc))
            raise CatalogueUnavailable(f"Product catalogue unavailable while resolving {product_id}") from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            logger.warning(
                "Catalogue answered with an error",
                product_id=str(product_id),
                status_code=response.status_code,
            )
            raise CatalogueUnavailable(
                f"Product catalogue answered {response.status_code} while resolving {product_id}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogueUnavailable(f"Malformed catalogue response for product {product_id}") from exc
        return snapshot_from_payload(payload)
