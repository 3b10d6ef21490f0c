"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test suite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from bazaar.domain.model.product import Product

T = TypeVar("T")


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique product ID."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def list_by_seller(self, seller_id: str) -> list[Product]:
        """Return every product owned by ``seller_id``."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new product, or overwrite an existing one."""

    @abstractmethod
    def update(self, product_id: str, mutate: Callable[[Product], T]) -> T:
        """Atomically load, mutate and persist one product document.

        ``mutate`` runs against the current stored state; if it raises,
        nothing is written and the exception propagates.  Raises
        EntityNotFoundError if the product does not exist.
        """
