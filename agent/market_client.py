"""Market API client.

Thin async HTTP client for the market's ACP endpoints. Every call
returns an ``APIResponse``; transport failures become error responses
instead of exceptions.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from agent.config import settings

logger = structlog.get_logger()


@dataclass
class APIError:
    """Represents a failed market call."""

    message: str
    status_code: int


@dataclass
class APIResponse:
    """Represents a market call result."""

    success: bool
    data: dict[str, Any] | None = None
    error: APIError | None = None


class MarketClient:
    """HTTP client for the market REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the market client.

        Args:
            base_url: Market base URL.
            timeout: Request timeout in seconds.
            transport: Optional transport, e.g. an ASGI app in tests.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> APIResponse:
        """Make a market request.

        Args:
            method: HTTP method.
            path: Endpoint path.
            json: Request body as JSON.
            params: Query parameters. None values are dropped.

        Returns:
            APIResponse with data or error.
        """
        client = await self._get_client()

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            logger.debug("Market request", method=method, path=path)

            response = await client.request(
                method=method,
                url=path,
                json=json,
                params=params,
            )

            if response.status_code >= 400:
                return APIResponse(
                    success=False,
                    error=APIError(
                        message=_error_message(response),
                        status_code=response.status_code,
                    ),
                )

            return APIResponse(success=True, data=response.json())

        except ValueError as e:
            logger.error("Invalid market response", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    message=f"Invalid JSON response: {path}",
                    status_code=502,
                ),
            )
        except httpx.TimeoutException as e:
            logger.error("Market request timeout", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    message=f"Request timed out: {path}",
                    status_code=504,
                ),
            )
        except httpx.RequestError as e:
            logger.error("Market request failed", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    message=f"Request failed: {e}",
                    status_code=502,
                ),
            )

    # =========================================================================
    # Catalog
    # =========================================================================

    async def list_merchants(self) -> APIResponse:
        """List all merchants."""
        return await self._request("GET", "/acp/merchants")

    async def list_products(
        self,
        q: str | None = None,
        merchant_id: str | None = None,
        limit: int | None = None,
    ) -> APIResponse:
        """Search products.

        Args:
            q: Search text.
            merchant_id: Merchant filter.
            limit: Result limit hint.

        Returns:
            APIResponse with product list.
        """
        return await self._request(
            "GET",
            "/acp/products",
            params={"q": q, "merchant_id": merchant_id, "limit": limit},
        )

    # =========================================================================
    # Cart & Checkout
    # =========================================================================

    async def create_cart(self) -> APIResponse:
        """Create an empty cart."""
        return await self._request("POST", "/acp/cart")

    async def add_item(
        self,
        cart_id: str,
        product_id: str,
        quantity: int = 1,
    ) -> APIResponse:
        """Add a product to a cart."""
        return await self._request(
            "POST",
            f"/acp/cart/{cart_id}/items",
            json={"product_id": product_id, "quantity": quantity},
        )

    async def checkout(
        self,
        cart_id: str,
        buyer: dict[str, Any],
        payment_method: dict[str, Any] | None = None,
    ) -> APIResponse:
        """Check out a cart.

        Args:
            cart_id: Cart ID.
            buyer: Buyer identity.
            payment_method: Delegated payment credential.

        Returns:
            APIResponse with checkout result.
        """
        body: dict[str, Any] = {"cart_id": cart_id, "buyer": buyer}
        if payment_method is not None:
            body["payment_method"] = payment_method
        return await self._request("POST", "/acp/checkout", json=body)

    async def get_order(self, order_id: str) -> APIResponse:
        """Get an order by ID."""
        return await self._request("GET", f"/acp/orders/{order_id}")


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from a market error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if body.get("error"):
            return str(body["error"])
        if body.get("detail"):
            return str(body["detail"])
    return f"Request failed with status code {response.status_code}"


# Global client instance
_market_client: MarketClient | None = None


def get_market_client(
    base_url: str | None = None,
    timeout: float | None = None,
) -> MarketClient:
    """Get or create the market client instance.

    Args:
        base_url: Market base URL. Defaults to settings.
        timeout: Request timeout. Defaults to settings.

    Returns:
        MarketClient instance.
    """
    global _market_client
    if _market_client is None:
        _market_client = MarketClient(
            base_url=base_url or settings.market_base,
            timeout=timeout or settings.market_timeout,
        )
    return _market_client
