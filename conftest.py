"""Shared fixtures: settings for a fake shop and an in-memory catalog stand-in."""

import asyncio

import pytest

from shopify_mcp.catalog import ProductRecord
from shopify_mcp.config import CatalogConfig, ServerConfig, Settings

SAMPLE_PRODUCTS = [
    ProductRecord(id=101, title="Classic Oxford Shirt", price="49.00", image="https://cdn.example.com/oxford.png"),
    ProductRecord(id=102, title="Linen Shirt", price="39.50", image=None),
    ProductRecord(id=103, title="Canvas Tote", price=None, image="https://cdn.example.com/tote.png"),
    ProductRecord(id=104, title="Denim Shirt", price="59.99", image=None),
]


class FakeCatalog:
    """Records calls and answers from a fixed product list"""

    def __init__(self, products=None, error: Exception | None = None, gate: asyncio.Event | None = None):
        self.products = list(SAMPLE_PRODUCTS if products is None else products)
        self.error = error
        self.gate = gate
        self.calls = []

    async def search_products(self, keyword: str) -> list[ProductRecord]:
        self.calls.append(("search_products", keyword))
        await self._wait()
        return [p for p in self.products if keyword.lower() in p.title.lower()][:5]

    async def recommend_products(self) -> list[ProductRecord]:
        self.calls.append(("recommend_products",))
        await self._wait()
        return self.products[:5]

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error


@pytest.fixture
def settings() -> Settings:
    return Settings(
        catalog=CatalogConfig(store_domain="test-shop.myshopify.com", access_token="shpat_test"),
        server=ServerConfig(keepalive_interval=30.0),
    )


@pytest.fixture
def make_catalog():
    return FakeCatalog
