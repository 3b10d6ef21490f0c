"""JSON-file-backed implementation of CouponRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from bazaar.domain.model.cart import Coupon
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path, key="code")

    def get_by_code(self, code: str) -> Coupon | None:
        raw = self._store.get(code)
        if raw is None:
            return None
        return Coupon(
            code=raw["code"],
            discount=Decimal(raw["discount"]),
            expires_at=datetime.fromisoformat(raw["expires_at"]),
        )

    def save(self, coupon: Coupon) -> None:
        self._store.upsert(
            {
                "code": coupon.code,
                "discount": str(coupon.discount),
                "expires_at": coupon.expires_at.isoformat(),
            }
        )
