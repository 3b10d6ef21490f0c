"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from bazaar.domain.model.order import Order

T = TypeVar("T")


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_payment_reference(self, reference: str) -> Order | None:
        """Return the order created for a payment correlation id, or None."""

    @abstractmethod
    def list_by_seller(self, seller_id: str) -> list[Order]:
        """Return orders containing at least one item of ``seller_id``."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""

    @abstractmethod
    def update(self, order_id: str, mutate: Callable[[Order], T]) -> T:
        """Atomically load, mutate and persist one order document.

        Raises EntityNotFoundError if the order does not exist.
        """
