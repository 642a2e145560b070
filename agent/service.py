"""Shopping agent.

Routes a message to checkout or search-and-add and drives the market
API accordingly. Market calls are sequential, are never retried and
are not rolled back when a later call fails.
"""

from decimal import Decimal
from typing import Any

import structlog

from agent.intents import (
    DEFAULT_QUERY,
    Intent,
    choose_merchant,
    detect_intent,
    extract_query,
    pick_cheapest,
)
from agent.market_client import APIResponse, MarketClient
from agent.schemas import (
    AgentReply,
    CartSummary,
    CartSummaryItem,
    MerchantRef,
    ProductEcho,
)
from agent.sessions import ConversationContext

logger = structlog.get_logger()

PRODUCT_SEARCH_LIMIT = 10
ITEMS_PER_TURN = 2
FALLBACK_CURRENCY = "TRY"

NO_CART_REPLY = "Sepet yok görünüyor. Önce ürün seçelim mi?"
NO_MERCHANT_REPLY = "Şu anda bağlı market yok gibi görünüyor."


class UpstreamError(Exception):
    """Raised when a market call fails."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        """Initialize upstream error.

        Args:
            message: Underlying error message.
            status_code: Status reported by the market, or a transport status.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def format_amount(amount: float | int | str) -> str:
    """Format a money amount without trailing zeros (39.9, 30, 101.45)."""
    return format(Decimal(str(amount)).normalize(), "f")


def _unwrap(response: APIResponse) -> dict[str, Any]:
    """Return response data or raise UpstreamError."""
    if not response.success:
        if response.error:
            raise UpstreamError(response.error.message, response.error.status_code)
        raise UpstreamError("Unknown market error")
    return response.data or {}


class ShoppingAgent:
    """Keyword-driven shopping agent over the market API."""

    def __init__(
        self,
        market: MarketClient,
        buyer_name: str = "Demo Buyer",
        payment_token: str = "pm_demo",
        default_query: str = DEFAULT_QUERY,
    ) -> None:
        """Initialize the agent.

        Args:
            market: Market API client.
            buyer_name: Buyer identity sent with every checkout.
            payment_token: Mock delegated payment token.
            default_query: Search query when the message names no product.
        """
        self.market = market
        self.buyer_name = buyer_name
        self.payment_token = payment_token
        self.default_query = default_query

    async def handle_message(
        self, message: str, context: ConversationContext
    ) -> AgentReply:
        """Handle one user message.

        Args:
            message: Free-text message.
            context: Conversation context; its cart is updated in place.

        Returns:
            Reply for the caller.

        Raises:
            UpstreamError: If any market call fails.
        """
        intent = detect_intent(message)
        logger.info(
            "Message received",
            intent=intent.value,
            session_id=context.session_id,
            cart_id=context.cart_id,
        )

        if intent == Intent.CHECKOUT:
            reply = await self.checkout(context)
        else:
            reply = await self.search_and_add(message, context)

        reply.session_id = context.session_id
        return reply

    async def checkout(self, context: ConversationContext) -> AgentReply:
        """Pay for the conversation's cart."""
        if not context.cart_id:
            return AgentReply(reply=NO_CART_REPLY)

        result = _unwrap(
            await self.market.checkout(
                cart_id=context.cart_id,
                buyer={"name": self.buyer_name},
                payment_method={"type": "delegated", "token": self.payment_token},
            )
        )
        order_id = result["order_id"]
        currency = result.get("currency", FALLBACK_CURRENCY)
        context.clear_cart()

        logger.info("Checkout complete", order_id=order_id, total=result.get("total"))

        return AgentReply(
            reply=(
                f"Ödeme alındı ✅ Toplam: {format_amount(result['total'])} {currency}. "
                f"Market kârı: {format_amount(result['total_profit'])} {currency}. "
                f"Sipariş no: {order_id}"
            ),
            order_id=order_id,
        )

    async def search_and_add(
        self, message: str, context: ConversationContext
    ) -> AgentReply:
        """Add the cheapest matches from the most profitable merchant."""
        merchants = _unwrap(await self.market.list_merchants()).get("items") or []
        merchant = choose_merchant(merchants)
        if merchant is None:
            return AgentReply(reply=NO_MERCHANT_REPLY)

        query = extract_query(message, default=self.default_query)
        products = (
            _unwrap(
                await self.market.list_products(
                    q=query,
                    merchant_id=merchant["id"],
                    limit=PRODUCT_SEARCH_LIMIT,
                )
            ).get("items")
            or []
        )

        if not products:
            return AgentReply(
                reply=(
                    f"“{merchant['name']}” içinde “{query}” için ürün bulamadım. "
                    "Başka ürün ya da market deneyelim mi?"
                ),
            )

        if not context.cart_id:
            context.cart_id = _unwrap(await self.market.create_cart())["id"]

        chosen = pick_cheapest(products, ITEMS_PER_TURN)
        for product in chosen:
            _unwrap(
                await self.market.add_item(
                    cart_id=context.cart_id,
                    product_id=product["id"],
                    quantity=1,
                )
            )

        logger.info(
            "Products added",
            merchant_id=merchant["id"],
            query=query,
            cart_id=context.cart_id,
            product_ids=[p["id"] for p in chosen],
        )

        return AgentReply(
            reply=(
                f"{merchant['name']} içinden {len(chosen)} ürünü sepete ekledim. "
                "“öde” dersen siparişi tamamlarım."
            ),
            cart_id=context.cart_id,
            merchant=MerchantRef(id=merchant["id"], name=merchant["name"]),
            cart_summary=CartSummary(
                currency=chosen[0].get("currency") or FALLBACK_CURRENCY,
                items=[
                    CartSummaryItem(
                        id=p["id"],
                        title=p["title"],
                        price=p["price"],
                        profit=p.get("profit"),
                    )
                    for p in chosen
                ],
            ),
            products=[
                ProductEcho(
                    id=p["id"],
                    title=p["title"],
                    price=p["price"],
                    profit=p.get("profit"),
                    image_url=p.get("image_url"),
                )
                for p in chosen
            ],
        )

    async def get_order(self, order_id: str) -> dict[str, Any]:
        """Fetch an order from the market.

        Raises:
            UpstreamError: If the market call fails, including 404.
        """
        return _unwrap(await self.market.get_order(order_id))
