"""Abstract repository for Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bazaar.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique cart ID."""

    @abstractmethod
    def get_by_id(self, cart_id: str) -> Cart | None:
        """Return a cart by its ID, or None."""

    @abstractmethod
    def get_by_user(self, user_id: str) -> Cart | None:
        """Return the single active cart of a user, or None."""

    @abstractmethod
    def get_by_payment_reference(self, reference: str) -> Cart | None:
        """Return the cart a checkout session was opened for, or None."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist a cart.  A user may own only one cart."""

    @abstractmethod
    def delete(self, cart_id: str) -> bool:
        """Delete a cart; True if this call removed it."""

    @abstractmethod
    def take_by_payment_reference(self, reference: str) -> Cart | None:
        """Atomically find and delete the cart for ``reference``.

        At most one caller ever receives the cart.
        """
