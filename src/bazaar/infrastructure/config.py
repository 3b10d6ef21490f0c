"""Application configuration, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from bazaar.domain.model.value_objects import DEFAULT_CURRENCY, Money
from bazaar.domain.service.order_pricing import CheckoutSettings

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def _decimal(val: str | None, default: str) -> Decimal:
    try:
        return Decimal(val) if val else Decimal(default)
    except InvalidOperation:
        return Decimal(default)


@dataclass
class LoggingConfig:
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_env(cls) -> LoggingConfig:
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv(
                "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
        )


@dataclass
class AppConfig:
    data_dir: Path = DEFAULT_DATA_DIR
    currency: str = DEFAULT_CURRENCY
    tax_rate: Decimal = Decimal("0")  # percent
    shipping_fee: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("10")
    checkout_url: str = "http://localhost/checkout"
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        data_dir = os.getenv("BAZAAR_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            currency=os.getenv("BAZAAR_CURRENCY", DEFAULT_CURRENCY),
            tax_rate=_decimal(os.getenv("BAZAAR_TAX_RATE"), "0"),
            shipping_fee=_decimal(os.getenv("BAZAAR_SHIPPING_FEE"), "0"),
            delivery_fee=_decimal(os.getenv("BAZAAR_DELIVERY_FEE"), "10"),
            checkout_url=os.getenv("BAZAAR_CHECKOUT_URL", "http://localhost/checkout"),
            logging=LoggingConfig.from_env(),
        )

    def checkout_settings(self) -> CheckoutSettings:
        return CheckoutSettings(
            tax_rate=self.tax_rate,
            shipping_fee=Money(self.shipping_fee, self.currency),
        )

    def delivery_fee_money(self) -> Money:
        return Money(self.delivery_fee, self.currency)
