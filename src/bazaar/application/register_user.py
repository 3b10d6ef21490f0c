"""Application services: users and coupons set up by an administrator."""

from __future__ import annotations

import logging
from datetime import datetime

from bazaar.application.add_product import parse_percentage
from bazaar.domain.exceptions import DuplicateRelationshipError, ValidationError
from bazaar.domain.model.cart import Coupon, normalize_coupon_code
from bazaar.domain.model.user import Role, User
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.domain.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)


class RegisterUserHandler:

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self, name: str, email: str, role: str = "user") -> User:
        if not name or not name.strip():
            raise ValidationError("User name is required")
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address: {email!r}")
        try:
            user_role = Role(role.lower())
        except ValueError:
            raise ValidationError(f"Invalid role: {role!r}") from None
        if self._user_repo.get_by_email(email) is not None:
            raise DuplicateRelationshipError(f"Email {email} is already registered")

        user = User(id=self._user_repo.next_id(), name=name.strip(), email=email.strip(), role=user_role)
        self._user_repo.save(user)
        logger.info("Registered %s user %s <%s>", user.role.value, user.id, user.email)
        return user


class CreateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self, code: str, discount: str, expires_at: datetime) -> Coupon:
        percentage = parse_percentage(discount)
        if not 0 < percentage <= 100:
            raise ValidationError("Coupon discount must be between 0 and 100")
        coupon = Coupon(code=normalize_coupon_code(code), discount=percentage, expires_at=expires_at)
        self._coupon_repo.save(coupon)
        logger.info("Coupon %s created (-%s%%, expires %s)", coupon.code, percentage, expires_at)
        return coupon
