"""Pytest configuration and fixtures for catalog manager tests."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_manager.api_client import ProductAPIClient
from catalog_manager.notifications import Toaster
from catalog_manager.query_cache import QueryCache
from catalog_manager.schemas import Product
from catalog_manager.view import ProductCatalogView


def make_product(
    product_id: int = 1,
    name: str = "Cadeira Gamer",
    price: str = "899.90",
    stock: int = 5,
    description: str | None = None,
) -> Product:
    """Create a product as the API would return it."""
    return Product(
        id=product_id,
        nome=name,
        descricao=description,
        preco=Decimal(price),
        estoque=stock,
    )


@pytest.fixture
def sample_products() -> list[Product]:
    """Two products in server order."""
    return [
        make_product(1, "Cadeira Gamer", "899.90", 5, "Reclinável"),
        make_product(2, "Mesa", "100.5", 3),
    ]


@pytest.fixture
def mock_api_client(sample_products: list[Product]) -> MagicMock:
    """Create a mock catalog API client."""
    client = MagicMock(spec=ProductAPIClient)

    # Make all methods async
    client.list_products = AsyncMock(return_value=sample_products)
    client.create_product = AsyncMock()
    client.update_product = AsyncMock()
    client.delete_product = AsyncMock(return_value=None)
    client.close = AsyncMock()

    return client


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def toaster() -> Toaster:
    return Toaster()


@pytest.fixture
def view(
    mock_api_client: MagicMock,
    cache: QueryCache,
    toaster: Toaster,
) -> ProductCatalogView:
    """Create an unmounted view over the mocked client."""
    return ProductCatalogView(api=mock_api_client, cache=cache, toaster=toaster)
