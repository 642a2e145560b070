"""Cart and order lifecycle for the market.

Handles cart creation, item adds, checkout and order lookup. Carts and
orders live in injectable ``Store`` backends.
"""

import copy
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import structlog

from market.catalog import Catalog, get_catalog
from market.config import settings
from market.exceptions import (
    CartNotFoundError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from market.schemas import (
    CartItemSchema,
    CartSchema,
    FulfilmentStatus,
    OrderSchema,
    PaymentStatus,
)
from market.store import InMemoryStore, Store

logger = structlog.get_logger()


# ============================================================================
# Cart & Order Entities
# ============================================================================


@dataclass
class CartItem:
    """Cart line. Economics are copied from the product when first added."""

    product_id: str
    quantity: int
    unit_price: Decimal
    unit_cost: Decimal
    unit_profit: Decimal
    merchant_id: str


@dataclass
class Cart:
    """Mutable collection of lines, at most one per product."""

    id: str
    currency: str
    items: list[CartItem] = field(default_factory=list)

    def find_item(self, product_id: str) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


@dataclass(frozen=True)
class Order:
    """Immutable result of a checkout."""

    id: str
    cart_id: str
    items: tuple[CartItem, ...]
    total: Decimal
    total_cost: Decimal
    total_profit: Decimal
    currency: str
    buyer: dict[str, Any]
    payment_status: PaymentStatus
    fulfilment_status: FulfilmentStatus
    created_at: datetime


# ============================================================================
# Cart Service
# ============================================================================


class CartService:
    """Cart, checkout and order operations over keyed stores."""

    def __init__(
        self,
        catalog: Catalog | None = None,
        carts: Store[Cart] | None = None,
        orders: Store[Order] | None = None,
        currency: str | None = None,
    ) -> None:
        """Initialize cart service.

        Args:
            catalog: Product catalog used to price new lines.
            carts: Cart store backend.
            orders: Order store backend.
            currency: Currency for new carts and orders.
        """
        self.catalog = catalog or get_catalog()
        self.carts: Store[Cart] = carts if carts is not None else InMemoryStore()
        self.orders: Store[Order] = orders if orders is not None else InMemoryStore()
        self.currency = currency or settings.currency

    def create_cart(self) -> Cart:
        """Create an empty cart with a fresh ID."""
        cart = Cart(id=str(uuid.uuid4()), currency=self.currency)
        self.carts.put(cart.id, cart)
        logger.info("Cart created", cart_id=cart.id)
        return cart

    def get_cart(self, cart_id: str) -> Cart:
        """Get cart by ID.

        Raises:
            CartNotFoundError: If the cart does not exist.
        """
        cart = self.carts.get(cart_id)
        if cart is None:
            raise CartNotFoundError(cart_id)
        return cart

    def add_item(self, cart_id: str, product_id: str, quantity: int = 1) -> Cart:
        """Add a product to a cart.

        Re-adding a product already in the cart increases that line's
        quantity; its snapshotted prices are left as they were.

        Args:
            cart_id: Cart ID.
            product_id: Catalog product ID.
            quantity: Quantity to add.

        Returns:
            Updated cart.

        Raises:
            CartNotFoundError: If the cart does not exist.
            ProductNotFoundError: If the product is not in the catalog.
        """
        cart = self.get_cart(cart_id)
        product = self.catalog.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        existing = cart.find_item(product_id)
        if existing:
            existing.quantity += quantity
        else:
            cart.items.append(
                CartItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    unit_cost=product.cost,
                    unit_profit=product.profit,
                    merchant_id=product.merchant_id,
                )
            )
        self.carts.put(cart.id, cart)

        logger.info(
            "Item added",
            cart_id=cart.id,
            product_id=product_id,
            quantity=quantity,
            lines=len(cart.items),
        )
        return cart

    def add_items(self, cart_id: str, items: list[tuple[str, int]]) -> Cart:
        """Add several products to a cart, all or nothing.

        Every product is looked up before the cart is modified, so an
        unknown product leaves the cart untouched.

        Args:
            cart_id: Cart ID.
            items: (product_id, quantity) pairs.

        Returns:
            Updated cart.

        Raises:
            CartNotFoundError: If the cart does not exist.
            ProductNotFoundError: If any product is not in the catalog.
        """
        cart = self.get_cart(cart_id)
        for product_id, _ in items:
            if self.catalog.get_product(product_id) is None:
                raise ProductNotFoundError(product_id)

        for product_id, quantity in items:
            cart = self.add_item(cart_id, product_id, quantity)
        return cart

    def checkout(
        self,
        cart_id: str,
        buyer: dict[str, Any] | None = None,
        payment_method: str | None = None,
    ) -> Order:
        """Convert a cart into a paid order.

        Totals are exact decimal sums of unit amount times quantity. The
        cart itself stays in the store.

        Args:
            cart_id: Cart ID.
            buyer: Buyer identity, copied onto the order.
            payment_method: Payment token. Every token succeeds in the mock.

        Returns:
            Created order.

        Raises:
            CartNotFoundError: If the cart does not exist.
        """
        cart = self.get_cart(cart_id)

        total = sum((i.unit_price * i.quantity for i in cart.items), Decimal(0))
        total_cost = sum((i.unit_cost * i.quantity for i in cart.items), Decimal(0))
        total_profit = sum((i.unit_profit * i.quantity for i in cart.items), Decimal(0))

        order = Order(
            id=str(uuid.uuid4()),
            cart_id=cart.id,
            items=tuple(replace(item) for item in cart.items),
            total=total,
            total_cost=total_cost,
            total_profit=total_profit,
            currency=cart.currency,
            buyer=copy.deepcopy(buyer or {}),
            payment_status=PaymentStatus.PAID,
            fulfilment_status=FulfilmentStatus.PROCESSING,
            created_at=datetime.now(timezone.utc),
        )
        self.orders.put(order.id, order)

        logger.info(
            "Order created",
            order_id=order.id,
            cart_id=cart.id,
            total=str(total),
            payment_method=payment_method,
        )
        return order

    def get_order(self, order_id: str) -> Order:
        """Get order by ID.

        Raises:
            OrderNotFoundError: If the order does not exist.
        """
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _item_to_schema(item: CartItem) -> CartItemSchema:
        return CartItemSchema(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=float(item.unit_price),
            unit_cost=float(item.unit_cost),
            unit_profit=float(item.unit_profit),
            merchant_id=item.merchant_id,
        )

    def cart_to_schema(self, cart: Cart) -> CartSchema:
        """Convert internal cart to schema."""
        return CartSchema(
            id=cart.id,
            items=[self._item_to_schema(item) for item in cart.items],
            currency=cart.currency,
        )

    def order_to_schema(self, order: Order) -> OrderSchema:
        """Convert internal order to schema."""
        return OrderSchema(
            id=order.id,
            cart_id=order.cart_id,
            items=[self._item_to_schema(item) for item in order.items],
            total=float(order.total),
            total_cost=float(order.total_cost),
            total_profit=float(order.total_profit),
            currency=order.currency,
            buyer=order.buyer,
            payment_status=order.payment_status,
            fulfilment_status=order.fulfilment_status,
            created_at=order.created_at,
        )


# Global cart service instance
_cart_service: CartService | None = None


def get_cart_service() -> CartService:
    """Get or create cart service instance.

    Returns:
        CartService instance.
    """
    global _cart_service
    if _cart_service is None:
        _cart_service = CartService()
    return _cart_service
