"""Market service main application.

A mock ACP market with a hardcoded multi-merchant catalog. Provides
merchant and product listing, carts, checkout and order lookup.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Annotated

import structlog
from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from market.cart import CartService, get_cart_service
from market.catalog import Catalog, get_catalog
from market.config import settings
from market.exceptions import NotFoundError
from market.schemas import (
    AddItemRequest,
    AddItemsRequest,
    CartSchema,
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    HealthResponse,
    MerchantListResponse,
    OrderSchema,
    ProductListResponse,
)


# ============================================================================
# Logging
# ============================================================================

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    catalog = get_catalog()
    get_cart_service()
    logger.info(
        "Starting market",
        port=settings.port,
        merchants=len(catalog.list_merchants()),
        products=len(catalog.list_products()),
    )

    yield

    logger.info("Market shutdown complete")


app = FastAPI(
    title="ACP Market",
    description="Mock multi-merchant market (catalog, cart, checkout)",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_catalog_dep() -> Catalog:
    """Get catalog dependency."""
    return get_catalog()


def get_carts() -> CartService:
    """Get cart service dependency."""
    return get_cart_service()


# ============================================================================
# Health Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Check service health."""
    return HealthResponse(status="ok", service=settings.service_name)


# ============================================================================
# Catalog Endpoints
# ============================================================================


@app.get("/acp/merchants", response_model=MerchantListResponse, tags=["Catalog"])
async def list_merchants(
    catalog: Annotated[Catalog, Depends(get_catalog_dep)],
) -> MerchantListResponse:
    """List every merchant."""
    merchants = catalog.list_merchants()
    return MerchantListResponse(
        total=len(merchants),
        items=[catalog.merchant_to_schema(m) for m in merchants],
    )


@app.get("/acp/products", response_model=ProductListResponse, tags=["Catalog"])
async def list_products(
    catalog: Annotated[Catalog, Depends(get_catalog_dep)],
    q: Annotated[str | None, Query()] = None,
    merchant_id: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ProductListResponse:
    """Search products.

    Args:
        q: Case-insensitive search in title/category.
        merchant_id: Restrict to one merchant.
        limit: Accepted for compatibility; all matches are returned.

    Returns:
        Matching products.
    """
    items = catalog.list_products(query=q, merchant_id=merchant_id)
    return ProductListResponse(
        total=len(items),
        count=len(items),
        items=[catalog.product_to_schema(p) for p in items],
    )


# ============================================================================
# Cart Endpoints
# ============================================================================


@app.post(
    "/acp/cart",
    response_model=CartSchema,
    status_code=status.HTTP_201_CREATED,
    tags=["Cart"],
)
async def create_cart(
    carts: Annotated[CartService, Depends(get_carts)],
) -> CartSchema:
    """Create an empty cart."""
    return carts.cart_to_schema(carts.create_cart())


@app.post(
    "/acp/cart/{cart_id}/items",
    response_model=CartSchema,
    responses={404: {"model": ErrorResponse}},
    tags=["Cart"],
)
async def add_item(
    cart_id: str,
    request: AddItemRequest,
    carts: Annotated[CartService, Depends(get_carts)],
) -> CartSchema:
    """Add a product to a cart.

    Raises:
        CartNotFoundError: If the cart does not exist.
        ProductNotFoundError: If the product does not exist.
    """
    cart = carts.add_item(cart_id, request.product_id, request.quantity)
    return carts.cart_to_schema(cart)


@app.post(
    "/acp/cart/{cart_id}/items/batch",
    response_model=CartSchema,
    responses={404: {"model": ErrorResponse}},
    tags=["Cart"],
)
async def add_items(
    cart_id: str,
    request: AddItemsRequest,
    carts: Annotated[CartService, Depends(get_carts)],
) -> CartSchema:
    """Add several products to a cart atomically."""
    cart = carts.add_items(
        cart_id, [(item.product_id, item.quantity) for item in request.items]
    )
    return carts.cart_to_schema(cart)


# ============================================================================
# Checkout & Order Endpoints
# ============================================================================


@app.post(
    "/acp/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
    tags=["Checkout"],
)
async def checkout(
    request: CheckoutRequest,
    carts: Annotated[CartService, Depends(get_carts)],
) -> CheckoutResponse:
    """Check out a cart and create a paid order."""
    order = carts.checkout(
        request.cart_id,
        buyer=request.buyer,
        payment_method=request.payment_method.token if request.payment_method else None,
    )
    return CheckoutResponse(
        order_id=order.id,
        payment_status=order.payment_status,
        total=float(order.total),
        total_cost=float(order.total_cost),
        total_profit=float(order.total_profit),
        currency=order.currency,
    )


@app.get(
    "/acp/orders/{order_id}",
    response_model=OrderSchema,
    responses={404: {"model": ErrorResponse}},
    tags=["Checkout"],
)
async def get_order(
    order_id: str,
    carts: Annotated[CartService, Depends(get_carts)],
) -> OrderSchema:
    """Get an order by ID."""
    return carts.order_to_schema(carts.get_order(order_id))


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    """Map missing carts, products and orders to 404."""
    logger.warning(
        "Entity not found",
        path=request.url.path,
        error=exc.message,
        **exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": exc.message},
    )
