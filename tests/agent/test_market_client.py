"""Tests for the market API client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from agent.market_client import MarketClient, get_market_client


def _mock_response(status_code: int, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body
    return response


class TestMarketClient:
    """Tests for MarketClient with a mocked HTTP layer."""

    @pytest.fixture
    def client(self):
        return MarketClient(base_url="http://localhost:3000/")

    @pytest.mark.asyncio
    async def test_client_initialization(self, client):
        assert client.base_url == "http://localhost:3000"
        assert client.timeout == 30.0
        assert client._client is None

    @pytest.mark.asyncio
    async def test_success(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                return_value=_mock_response(200, {"type": "merchant_list", "items": []})
            )
            mock_get.return_value = mock_http

            result = await client.list_merchants()

        assert result.success is True
        assert result.data["type"] == "merchant_list"
        mock_http.request.assert_called_once_with(
            method="GET", url="/acp/merchants", json=None, params=None
        )

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(return_value=_mock_response(200, {"items": []}))
            mock_get.return_value = mock_http

            await client.list_products(q="sut", limit=10)

        assert mock_http.request.call_args.kwargs["params"] == {"q": "sut", "limit": 10}

    @pytest.mark.asyncio
    async def test_error_body_message(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                return_value=_mock_response(404, {"error": "Cart not found"})
            )
            mock_get.return_value = mock_http

            result = await client.add_item("missing", "P-001")

        assert result.success is False
        assert result.error.status_code == 404
        assert result.error.message == "Cart not found"

    @pytest.mark.asyncio
    async def test_error_without_json_body(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                return_value=_mock_response(502, json_error=True)
            )
            mock_get.return_value = mock_http

            result = await client.create_cart()

        assert result.success is False
        assert result.error.message == "Request failed with status code 502"

    @pytest.mark.asyncio
    async def test_request_timeout(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(side_effect=httpx.TimeoutException("timeout"))
            mock_get.return_value = mock_http

            result = await client.create_cart()

        assert result.success is False
        assert result.error.status_code == 504
        assert "timed out" in result.error.message

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            mock_get.return_value = mock_http

            result = await client.get_order("o-1")

        assert result.success is False
        assert result.error.status_code == 502
        assert "Connection refused" in result.error.message

    @pytest.mark.asyncio
    async def test_checkout_body(self, client):
        with patch.object(client, "_get_client", new_callable=AsyncMock) as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                return_value=_mock_response(201, {"order_id": "o-1"})
            )
            mock_get.return_value = mock_http

            await client.checkout(
                "c1",
                buyer={"name": "Test Buyer"},
                payment_method={"type": "delegated", "token": "pm_demo"},
            )

        assert mock_http.request.call_args.kwargs["json"] == {
            "cart_id": "c1",
            "buyer": {"name": "Test Buyer"},
            "payment_method": {"type": "delegated", "token": "pm_demo"},
        }

    @pytest.mark.asyncio
    async def test_close(self, client):
        await client._get_client()
        assert client._client is not None

        await client.close()

        assert client._client is None


class TestMarketClientAgainstMarket:
    """Tests for MarketClient against the in-process market app."""

    @pytest.mark.asyncio
    async def test_cart_flow(self, asgi_market: MarketClient):
        cart = await asgi_market.create_cart()
        cart_id = cart.data["id"]

        added = await asgi_market.add_item(cart_id, "P-001", quantity=2)
        result = await asgi_market.checkout(cart_id, buyer={"name": "Test Buyer"})
        order = await asgi_market.get_order(result.data["order_id"])
        await asgi_market.close()

        assert added.data["items"][0]["quantity"] == 2
        assert result.data["total"] == 79.8
        assert order.data["buyer"] == {"name": "Test Buyer"}

    @pytest.mark.asyncio
    async def test_not_found(self, asgi_market: MarketClient):
        result = await asgi_market.get_order("missing")
        await asgi_market.close()

        assert result.success is False
        assert result.error.status_code == 404
        assert result.error.message == "Order not found"


def test_get_market_client_uses_settings():
    client = get_market_client()

    assert client is get_market_client()
    assert client.base_url.startswith("http")
