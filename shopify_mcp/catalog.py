# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Shopify product catalog client.

Two read-only queries against the Admin REST products endpoint, each result row
normalized into a compact ProductRecord. No caching and no retries: every call
is one outbound request and any failure surfaces as UpstreamError.
"""

import asyncio
import json
import logging
from dataclasses import asdict, dataclass

import aiohttp

from shopify_mcp.config import CatalogConfig
from shopify_mcp.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductRecord:
    id: int | str
    title: str
    price: str | None = None
    image: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_catalog(cls, item: dict) -> "ProductRecord":
        """Normalize one catalog row: price from the first variant, image from the primary image"""
        if not isinstance(item, dict) or "id" not in item or "title" not in item:
            raise UpstreamError("Catalog returned a product without id or title")

        price = None
        variants = item.get("variants") or []
        if isinstance(variants, list) and variants and isinstance(variants[0], dict):
            price = variants[0].get("price")
            if price is not None:
                price = str(price)

        image = None
        primary_image = item.get("image")
        if isinstance(primary_image, dict):
            image = primary_image.get("src")

        return cls(id=item["id"], title=item["title"], price=price, image=image)


class CatalogClient:
    """Async client for the Shopify products endpoint"""

    def __init__(self, config: CatalogConfig):
        self.config = config

    async def search_products(self, keyword: str) -> list[ProductRecord]:
        """Search products whose title matches keyword, at most result_limit rows in catalog order"""
        logger.info(f"[CATALOG] Searching products for keyword: '{keyword}'")
        return await self._fetch_products({"title": keyword, "limit": str(self.config.result_limit)})

    async def recommend_products(self) -> list[ProductRecord]:
        """Top best-selling products, at most result_limit rows"""
        logger.info("[CATALOG] Fetching best-selling products")
        return await self._fetch_products({"limit": str(self.config.result_limit), "order": "best-selling"})

    async def _fetch_products(self, params: dict[str, str]) -> list[ProductRecord]:
        url = self.config.products_url
        headers = {"X-Shopify-Access-Token": self.config.access_token or "", "Accept": "application/json"}
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=headers) as response:
                    logger.debug(f"[CATALOG] Request URL: {response.url}")
                    if response.status != 200:
                        error_text = (await response.read()).decode("utf-8", errors="replace")
                        logger.error(f"[CATALOG] API error - Status: {response.status}")
                        logger.error(f"[CATALOG] Error response: {error_text[:500]}")
                        raise UpstreamError(f"Catalog API returned status {response.status}")
                    body = await response.read()
        except aiohttp.ClientError as e:
            logger.error(f"[CATALOG] Request failed: {e}")
            raise UpstreamError(f"Catalog request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"[CATALOG] Request timed out after {self.config.timeout}s")
            raise UpstreamError("Catalog request timed out") from e

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise UpstreamError(f"Catalog returned invalid JSON: {e}") from e

        return self._parse_products(data)

    def _parse_products(self, data) -> list[ProductRecord]:
        if not isinstance(data, dict):
            raise UpstreamError("Catalog returned an unexpected response shape")

        items = data.get("products")
        if items is None:
            return []
        if not isinstance(items, list):
            raise UpstreamError("Catalog field 'products' is not a list")

        products = [ProductRecord.from_catalog(item) for item in items[: self.config.result_limit]]
        logger.info(f"[CATALOG] Found {len(products)} products")
        return products
