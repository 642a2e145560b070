"""Intent classification and selection rules for the shopping agent.

All rules are keyword based and deterministic.
"""

from enum import Enum
from typing import Any


class Intent(str, Enum):
    """Coarse classification of a user message."""

    CHECKOUT = "checkout"
    SEARCH_AND_ADD = "search_and_add"


CHECKOUT_KEYWORDS = ("öde", "satın al", "tamamla")

# (keywords, search query) checked in order
QUERY_BUCKETS = (
    (("peynir",), "peynir"),
    (("tereyağı", "tereyagi"), "tereyağı"),
)

DEFAULT_QUERY = "sut"


def detect_intent(text: str) -> Intent:
    """Classify a message as checkout or search-and-add.

    Args:
        text: Raw user message.

    Returns:
        CHECKOUT if any checkout keyword occurs, else SEARCH_AND_ADD.
    """
    t = text.lower()
    if any(keyword in t for keyword in CHECKOUT_KEYWORDS):
        return Intent.CHECKOUT
    return Intent.SEARCH_AND_ADD


def extract_query(text: str, default: str = DEFAULT_QUERY) -> str:
    """Map a message to a product search query.

    Args:
        text: Raw user message.
        default: Query used when no bucket matches.

    Returns:
        Search query for the market.
    """
    t = text.lower()
    for keywords, query in QUERY_BUCKETS:
        if any(keyword in t for keyword in keywords):
            return query
    return default


def choose_merchant(merchants: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Pick the merchant with the highest profit weight.

    A missing weight counts as zero. On ties the earliest merchant wins.
    """
    if not merchants:
        return None
    return max(merchants, key=lambda m: m.get("profit_weight") or 0)


def pick_cheapest(products: list[dict[str, Any]], count: int = 2) -> list[dict[str, Any]]:
    """Return the ``count`` lowest-priced products, ties in listing order."""
    return sorted(products, key=lambda p: p.get("price") or 0)[:count]
