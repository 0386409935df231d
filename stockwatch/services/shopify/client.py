# stockwatch.services.shopify.client

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from stockwatch.core.config import get_settings
from stockwatch.core.exceptions import MutationError, UpstreamFetchError
from stockwatch.core.utils import legacy_id, product_gid
from stockwatch.integrations.base import CatalogGateway
from stockwatch.schemas.catalog import CatalogProduct

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = "id,title,status,variants"

PRODUCT_STATUS_MUTATION = """
mutation productUpdate($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      status
    }
    userErrors {
      field
      message
    }
  }
}
"""


class ShopifyCatalogClient(CatalogGateway):
    """
    Catalog gateway for one shop, over the Shopify Admin API.

    Hybrid approach:
    - REST for reads (product with variants, paged product listing): the REST
      variant payload carries ``inventory_item_id`` and ``inventory_quantity``
      directly, which is exactly what resolution and aggregation need.
    - GraphQL ``productUpdate`` for the status mutation (ACTIVE / DRAFT).

    Every request carries a timeout. Read failures raise UpstreamFetchError,
    mutation failures raise MutationError; a 404 on a product read means the
    product no longer exists and returns None.
    """

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        if not shop_domain or not access_token:
            raise ValueError("shop_domain and access_token are required for the catalog client")

        self.shop_domain = shop_domain
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout if timeout is not None else settings.CATALOG_TIMEOUT_SECONDS
        self._transport = transport

        self.rest_base_url = f"https://{shop_domain}/admin/api/{self.api_version}"
        self.graphql_url = f"{self.rest_base_url}/graphql.json"
        self.headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """GET a REST resource. Returns None on 404."""
        url = f"{self.rest_base_url}/{path.lstrip('/')}"
        try:
            async with self._client() as client:
                response = await client.get(url, headers=self.headers, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error fetching {path} for {self.shop_domain}: {str(e)}")
            raise UpstreamFetchError(f"Network error fetching {path}: {str(e)}")

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.error(f"Shopify API error {response.status_code} on {path}: {response.text[:200]}")
            raise UpstreamFetchError(f"Failed to fetch {path}: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            raise UpstreamFetchError(f"Invalid JSON returned for {path}")

    async def get_product(self, product_id: str) -> Optional[CatalogProduct]:
        data = await self._get(f"products/{legacy_id(product_id)}.json", params={"fields": PRODUCT_FIELDS})
        if data is None or not data.get("product"):
            return None
        return CatalogProduct.model_validate(data["product"])

    async def list_products(self, page_size: int, since_id: Optional[str] = None) -> List[CatalogProduct]:
        params: Dict[str, Any] = {"limit": page_size, "fields": PRODUCT_FIELDS}
        if since_id:
            params["since_id"] = legacy_id(since_id)
        data = await self._get("products.json", params=params)
        if data is None:
            raise UpstreamFetchError("Product listing endpoint not found")
        return [CatalogProduct.model_validate(item) for item in data.get("products", [])]

    async def set_product_visibility(self, product_id: str, visible: bool) -> None:
        status = "ACTIVE" if visible else "DRAFT"
        payload = {
            "query": PRODUCT_STATUS_MUTATION,
            "variables": {"product": {"id": product_gid(product_id), "status": status}},
        }
        try:
            async with self._client() as client:
                response = await client.post(self.graphql_url, headers=self.headers, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Network error setting product {product_id} to {status}: {str(e)}")
            raise MutationError(f"Network error setting product {product_id} to {status}: {str(e)}")

        if response.status_code != 200:
            raise MutationError(f"productUpdate HTTP {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError:
            raise MutationError("productUpdate returned invalid JSON")

        if body.get("errors"):
            raise MutationError(f"GraphQL errors: {json.dumps(body['errors'])}")

        result = (body.get("data") or {}).get("productUpdate") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            raise MutationError(f"GraphQL user errors: {json.dumps(user_errors)}")
        if not result.get("product"):
            raise MutationError(f"productUpdate returned no product for {product_id}")

        logger.info(f"Product {product_id} on {self.shop_domain} set to {status}")
