"""Abstract repository for coupons."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bazaar.domain.model.cart import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return the coupon with this (upper-case) code, or None."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a coupon."""
