"""Pydantic schemas for the agent API."""

from pydantic import BaseModel, Field


class MessageRequest(BaseModel):
    """Incoming user message.

    ``message`` is optional at the schema level so a missing message
    gets the agent's own 400 instead of a validation error.
    """

    message: str | None = Field(None, description="Free-text shopping message")
    session_id: str | None = Field(
        None, description="Conversation ID; the agent remembers its cart"
    )
    cart_id: str | None = Field(None, description="Cart to continue with")


class MerchantRef(BaseModel):
    """Chosen merchant."""

    id: str
    name: str


class CartSummaryItem(BaseModel):
    """Product added in this turn."""

    id: str
    title: str
    price: float
    profit: float | None = None


class CartSummary(BaseModel):
    """Products added in this turn and their currency."""

    currency: str
    items: list[CartSummaryItem]


class ProductEcho(CartSummaryItem):
    """Added product with its image."""

    image_url: str | None = None


class AgentReply(BaseModel):
    """Agent reply with optional structured data."""

    reply: str
    cart_id: str | None = None
    merchant: MerchantRef | None = None
    cart_summary: CartSummary | None = None
    products: list[ProductEcho] | None = None
    order_id: str | None = None
    session_id: str | None = None
