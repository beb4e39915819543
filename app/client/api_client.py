"""Async HTTP client for the catalog API."""

from typing import Any

import httpx

from app.core.config import get_settings


class CatalogAPIError(Exception):
    """The catalog API rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CatalogClient:
    """Client for the book and cart routes.

    Records are returned as the JSON dicts the API sends (``_id``, camelCase
    field names).
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root. If not provided, uses settings.
            token: Bearer token sent on every request, if any.
            transport: Optional transport, e.g. ``httpx.ASGITransport`` in tests.
            timeout: Request timeout in seconds.
        """
        if base_url is None:
            base_url = get_settings().api_base_url
        self._base_url = base_url
        self._token = token
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise CatalogAPIError(f"Network error: {str(e)}") from e

        if response.status_code >= 400:
            raise CatalogAPIError(_error_message(response), status_code=response.status_code)
        return response.json()

    # Books
    async def list_books(self, admin: bool = False) -> list[dict]:
        return await self._request("GET", "/admin/books" if admin else "/books")

    async def get_book(self, book_id: str) -> dict:
        return await self._request("GET", f"/books/{book_id}")

    async def create_book(self, fields: dict, admin: bool = False) -> dict:
        """Create a book. The response carries ``id`` and the stored ``book``."""
        return await self._request("POST", "/admin/books" if admin else "/books", json=fields)

    async def create_books(self, books: list[dict]) -> int:
        """Bulk-create books and return how many were inserted."""
        data = await self._request("POST", "/admin/books", json=books)
        return data["insertedCount"]

    async def update_book(self, book_id: str, patch: dict) -> dict:
        return await self._request("PUT", f"/admin/books/{book_id}", json=patch)

    async def delete_book(self, book_id: str, admin: bool = True) -> dict:
        path = f"/admin/books/{book_id}" if admin else f"/books/{book_id}"
        return await self._request("DELETE", path)

    # Cart
    async def list_cart(self) -> list[dict]:
        return await self._request("GET", "/cart")

    async def add_to_cart(self, book_id: str, quantity: int = 1) -> dict:
        """Add a book to the cart and return the created item."""
        data = await self._request("POST", "/cart", json={"bookId": book_id, "quantity": quantity})
        return data["item"]

    async def remove_cart_item(self, item_id: str) -> dict:
        return await self._request("DELETE", f"/cart/{item_id}")

    async def clear_cart(self) -> int:
        data = await self._request("DELETE", "/cart")
        return data["deletedCount"]


def _error_message(response: httpx.Response) -> str:
    """Pull the API's error text out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return f"Catalog API error: {response.status_code}"
    if isinstance(data, dict):
        message = data.get("error") or data.get("detail")
        if isinstance(message, str):
            return message
    return f"Catalog API error: {response.status_code}"
