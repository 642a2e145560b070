"""Pydantic schemas for the market API.

Defines request/response models for merchants, products, carts,
checkout and orders. Money is exposed as plain JSON numbers.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Catalog Schemas
# ============================================================================


class MerchantSchema(BaseModel):
    """Merchant details."""

    id: str = Field(..., description="Merchant ID")
    name: str = Field(..., description="Display name")
    location: str = Field(..., description="City")
    profit_weight: float = Field(..., description="Ranking weight for selection")


class MerchantListResponse(BaseModel):
    """Merchant list response."""

    type: str = "merchant_list"
    total: int
    items: list[MerchantSchema]


class ProductSchema(BaseModel):
    """Product details."""

    id: str = Field(..., description="Product ID")
    merchant_id: str = Field(..., description="Owning merchant ID")
    title: str
    category: str
    price: float
    cost: float
    profit: float
    currency: str
    image_url: str | None = None


class ProductListResponse(BaseModel):
    """Product search response. ``total`` and ``count`` are always equal."""

    type: str = "product_list"
    total: int
    count: int
    items: list[ProductSchema]


# ============================================================================
# Cart Schemas
# ============================================================================


class CartItemSchema(BaseModel):
    """Cart line with product economics captured when it was added."""

    product_id: str
    quantity: int
    unit_price: float
    unit_cost: float
    unit_profit: float
    merchant_id: str


class CartSchema(BaseModel):
    """Cart with its lines."""

    id: str
    items: list[CartItemSchema] = Field(default_factory=list)
    currency: str


class AddItemRequest(BaseModel):
    """Request to add a product to a cart."""

    product_id: str = Field(..., description="Catalog product ID")
    quantity: int = Field(default=1, ge=1, description="Quantity to add")


class AddItemsRequest(BaseModel):
    """Request to add several products to a cart in one step."""

    items: list[AddItemRequest] = Field(..., min_length=1)


# ============================================================================
# Checkout & Order Schemas
# ============================================================================


class PaymentStatus(str, Enum):
    """Order payment status."""

    PAID = "paid"


class FulfilmentStatus(str, Enum):
    """Order fulfilment status."""

    PROCESSING = "processing"


class PaymentMethod(BaseModel):
    """Delegated payment credential. The mock accepts any token."""

    type: str = "delegated"
    token: str


class CheckoutRequest(BaseModel):
    """Request to check out a cart."""

    cart_id: str
    buyer: dict[str, Any] | None = None
    payment_method: PaymentMethod | None = None


class CheckoutResponse(BaseModel):
    """Checkout result."""

    type: str = "checkout_result"
    order_id: str
    payment_status: PaymentStatus
    total: float
    total_cost: float
    total_profit: float
    currency: str


class OrderSchema(BaseModel):
    """Order snapshot taken at checkout."""

    id: str
    cart_id: str
    items: list[CartItemSchema]
    total: float
    total_cost: float
    total_profit: float
    currency: str
    buyer: dict[str, Any] = Field(default_factory=dict)
    payment_status: PaymentStatus
    fulfilment_status: FulfilmentStatus
    created_at: datetime


class ErrorResponse(BaseModel):
    """Error response."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
