"""Catalog API Client.

Thin HTTP client for the remote products resource. Failures are raised as
APIError subclasses and propagate immediately: no retries, and no timeout
configuration beyond the transport defaults.
"""

from typing import Any, Self

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from catalog_manager.exceptions import (
    HttpError,
    NetworkError,
    NotFoundError,
    RemoteValidationError,
    ServerError,
)
from catalog_manager.schemas import (
    WIRE_NAMES,
    Product,
    ProductFormData,
    ProductUpdateData,
)

logger = structlog.get_logger()

_PRODUCT_LIST = TypeAdapter(list[Product])
_FIELD_BY_WIRE_NAME = {wire: field for field, wire in WIRE_NAMES.items()}


def _decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _field_errors(body: Any) -> dict[str, str]:
    """Extract field errors from a `{"preco": ["msg", ...]}` style body."""
    if not isinstance(body, dict):
        return {}

    errors: dict[str, str] = {}
    for key, value in body.items():
        field = _FIELD_BY_WIRE_NAME.get(key)
        if field is None:
            continue
        if isinstance(value, list) and value:
            errors[field] = str(value[0])
        elif isinstance(value, str):
            errors[field] = value
    return errors


def _error_from_response(method: str, path: str, response: httpx.Response) -> HttpError:
    """Map a non-2xx response to the matching HttpError subclass."""
    status = response.status_code
    body = _decode_body(response)

    if status == 404:
        return NotFoundError(method, path, status, body)
    if 400 <= status < 500:
        return RemoteValidationError(
            method, path, status, body, field_errors=_field_errors(body)
        )
    if status >= 500:
        return ServerError(method, path, status, body)
    return HttpError(method, path, status, body)


class ProductAPIClient:
    """HTTP client for the catalog products resource.

    Paths are relative to the resource base URL, e.g.
    `http://localhost:8000/api/produtos` + `/5/`.
    """

    def __init__(self, base_url: str) -> None:
        """Initialize the API client.

        Args:
            base_url: Products resource base URL.
        """
        self.base_url = base_url.rstrip("/")
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            json: Request body as JSON.

        Returns:
            Decoded JSON body, or None for empty responses.

        Raises:
            NetworkError: If no response was received.
            HttpError: On a non-2xx status or an undecodable body.
        """
        client = await self._get_client()

        logger.debug(
            "Making API request",
            method=method,
            path=path,
            has_body=json is not None,
        )

        try:
            response = await client.request(method=method, url=path, json=json)
        except httpx.TimeoutException as e:
            logger.error("API request timeout", method=method, path=path, error=str(e))
            raise NetworkError(method, path, f"timed out ({e})") from e
        except httpx.RequestError as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise NetworkError(method, path, str(e)) from e

        if not 200 <= response.status_code < 300:
            error = _error_from_response(method, path, response)
            logger.warning(
                "API request rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                error_type=type(error).__name__,
            )
            raise error

        # Handle empty responses (204 No Content)
        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Undecodable API response",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise HttpError(method, path, response.status_code, response.text) from e

    def _parse_product(self, method: str, path: str, data: Any) -> Product:
        try:
            return Product.model_validate(data)
        except PydanticValidationError as e:
            logger.error("Malformed product in API response", method=method, path=path)
            raise HttpError(method, path, 200, data) from e

    # =========================================================================
    # Product Endpoints
    # =========================================================================

    async def list_products(self) -> list[Product]:
        """List all products in server order.

        Returns:
            List of products.
        """
        data = await self._request(method="GET", path="/")
        try:
            return _PRODUCT_LIST.validate_python(data or [])
        except PydanticValidationError as e:
            logger.error("Malformed product list in API response")
            raise HttpError("GET", "/", 200, data) from e

    async def create_product(self, data: ProductFormData) -> Product:
        """Create a product.

        Args:
            data: Validated product data.

        Returns:
            Created product with its server-assigned ID.
        """
        body = await self._request(method="POST", path="/", json=data.to_payload())
        product = self._parse_product("POST", "/", body)
        logger.info("Product created", product_id=product.id)
        return product

    async def update_product(
        self,
        product_id: int,
        data: ProductUpdateData | ProductFormData,
    ) -> Product:
        """Update a product; only the fields set on `data` change.

        Args:
            product_id: Product identifier.
            data: Full or partial product data.

        Returns:
            Updated product.
        """
        path = f"/{product_id}/"
        body = await self._request(method="PATCH", path=path, json=data.to_payload())
        product = self._parse_product("PATCH", path, body)
        logger.info("Product updated", product_id=product_id)
        return product

    async def delete_product(self, product_id: int) -> None:
        """Delete a product.

        Args:
            product_id: Product identifier.
        """
        await self._request(method="DELETE", path=f"/{product_id}/")
        logger.info("Product deleted", product_id=product_id)
