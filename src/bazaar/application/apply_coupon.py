"""Application service: Apply Coupon use case."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from bazaar.application.dto import CartDTO, cart_to_dto
from bazaar.application.lookups import load_user_cart
from bazaar.domain.exceptions import InvalidCouponError
from bazaar.domain.model.cart import normalize_coupon_code
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.coupon_repository import CouponRepository

logger = logging.getLogger(__name__)


class ApplyCouponHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        coupon_repo: CouponRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._cart_repo = cart_repo
        self._coupon_repo = coupon_repo
        self._clock = clock

    def handle(self, user_id: str, code: str) -> CartDTO:
        """Apply a non-expired coupon, replacing any coupon applied before."""
        normalized = normalize_coupon_code(code)
        coupon = self._coupon_repo.get_by_code(normalized)
        if coupon is None or not coupon.is_valid_at(self._clock()):
            raise InvalidCouponError("Coupon is invalid or expired")

        cart = load_user_cart(self._cart_repo, user_id)
        cart.apply_coupon(coupon)
        self._cart_repo.save(cart)
        logger.info("Cart %s: coupon %s applied (-%s%%)", cart.id, coupon.code, coupon.discount)
        return cart_to_dto(cart)
