"""Shared fixtures for market and agent tests."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

import agent.market_client as market_client_module
import agent.sessions as sessions_module
import market.cart as cart_module
import market.catalog as catalog_module
from agent.market_client import APIError, APIResponse, MarketClient
from agent.service import ShoppingAgent
from agent.sessions import SessionStore


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global singletons before and after each test."""
    catalog_module._catalog = None
    cart_module._cart_service = None
    market_client_module._market_client = None
    sessions_module._session_store = None
    yield
    catalog_module._catalog = None
    cart_module._cart_service = None
    market_client_module._market_client = None
    sessions_module._session_store = None


# ============================================================================
# Market Fixtures
# ============================================================================


@pytest.fixture
def market_client():
    """Create market test client."""
    from market.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def catalog():
    """Create a seed catalog."""
    from market.catalog import Catalog

    return Catalog()


@pytest.fixture
def cart_service(catalog):
    """Create a cart service with fresh in-memory stores."""
    from market.cart import CartService

    return CartService(catalog=catalog, currency="TRY")


# ============================================================================
# Agent Fixtures
# ============================================================================


@pytest.fixture
def mock_market() -> MagicMock:
    """Create a mock market client."""
    client = MagicMock(spec=MarketClient)

    client.list_merchants = AsyncMock()
    client.list_products = AsyncMock()
    client.create_cart = AsyncMock()
    client.add_item = AsyncMock()
    client.checkout = AsyncMock()
    client.get_order = AsyncMock()
    client.close = AsyncMock()

    return client


@pytest.fixture
def shopping_agent(mock_market: MagicMock) -> ShoppingAgent:
    """Create a shopping agent over the mock market."""
    return ShoppingAgent(market=mock_market, buyer_name="Test Buyer")


@pytest.fixture
def asgi_market() -> MarketClient:
    """Market client wired to the in-process market app."""
    from market.main import app

    return MarketClient(
        base_url="http://market",
        transport=httpx.ASGITransport(app=app),
    )


@pytest.fixture
def agent_client(asgi_market: MarketClient):
    """Agent test client talking to the in-process market."""
    from agent.main import app, get_agent, get_sessions

    sessions = SessionStore()
    app.dependency_overrides[get_agent] = lambda: ShoppingAgent(market=asgi_market)
    app.dependency_overrides[get_sessions] = lambda: sessions
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mocked_agent_client(mock_market: MagicMock):
    """Agent test client over the mock market."""
    from agent.main import app, get_agent

    app.dependency_overrides[get_agent] = lambda: ShoppingAgent(market=mock_market)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def make_success_response(data: dict) -> APIResponse:
    """Create a successful API response."""
    return APIResponse(success=True, data=data)


def make_error_response(message: str, status_code: int = 500) -> APIResponse:
    """Create an error API response."""
    return APIResponse(
        success=False,
        error=APIError(message=message, status_code=status_code),
    )


@pytest.fixture
def success():
    """Factory for successful API responses."""
    return make_success_response


@pytest.fixture
def failure():
    """Factory for failed API responses."""
    return make_error_response
