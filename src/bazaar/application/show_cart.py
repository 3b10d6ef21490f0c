"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from bazaar.application.dto import CartDTO, cart_to_dto
from bazaar.application.lookups import load_user_cart
from bazaar.domain.repository.cart_repository import CartRepository


class ShowCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> CartDTO:
        return cart_to_dto(load_user_cart(self._cart_repo, user_id))
