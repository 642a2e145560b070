"""Key-value store abstraction for carts and orders.

The cart service only ever needs ``get`` and ``put`` by identifier, so
any backend implementing ``Store`` can replace the in-memory one.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Store(ABC, Generic[T]):
    """Abstract keyed store."""

    @abstractmethod
    def get(self, key: str) -> T | None:
        """Get a value by key.

        Args:
            key: Entity identifier.

        Returns:
            Stored value or None if absent.
        """

    @abstractmethod
    def put(self, key: str, value: T) -> None:
        """Store a value under key, replacing any previous value.

        Args:
            key: Entity identifier.
            value: Value to store.
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored values."""


class InMemoryStore(Store[T]):
    """Dict-backed store. Nothing is evicted until the process exits."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    def get(self, key: str) -> T | None:
        return self._items.get(key)

    def put(self, key: str, value: T) -> None:
        self._items[key] = value

    def __len__(self) -> int:
        return len(self._items)
