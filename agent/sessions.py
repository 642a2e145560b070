"""Per-conversation cart tracking.

Each request carries a ``ConversationContext``. A caller either passes
its ``cart_id`` back on every message or names a ``session_id`` and
lets the agent remember the cart between messages.
"""

from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass
class ConversationContext:
    """Cart state for one conversation."""

    session_id: str | None = None
    cart_id: str | None = None

    def clear_cart(self) -> None:
        self.cart_id = None


class SessionStore:
    """In-memory map of session ID to that session's open cart."""

    def __init__(self) -> None:
        self._carts: dict[str, str | None] = {}

    def resolve(
        self,
        session_id: str | None = None,
        cart_id: str | None = None,
    ) -> ConversationContext:
        """Build the context for a request.

        An explicit cart ID wins over the one remembered for the session.

        Args:
            session_id: Optional conversation identifier.
            cart_id: Optional cart identifier supplied by the caller.

        Returns:
            Context for this request.
        """
        if cart_id is None and session_id is not None:
            cart_id = self._carts.get(session_id)
        return ConversationContext(session_id=session_id, cart_id=cart_id)

    def save(self, context: ConversationContext) -> None:
        """Remember the context's cart for its session, if it has one."""
        if context.session_id is None:
            return
        self._carts[context.session_id] = context.cart_id
        logger.debug(
            "Session saved",
            session_id=context.session_id,
            cart_id=context.cart_id,
        )

    def __len__(self) -> int:
        return len(self._carts)


# Global session store instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store instance.

    Returns:
        SessionStore instance.
    """
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
