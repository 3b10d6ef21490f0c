"""Payment gateway for local runs.

Hands out a fresh reference and a checkout URL without calling any
provider.  Payment confirmations are then fed in through the CLI's
webhook replay command, in the provider's payload format.
"""

from __future__ import annotations

import logging
import uuid

from bazaar.domain.exceptions import UpstreamPaymentError
from bazaar.domain.model.value_objects import Money
from bazaar.domain.service.payment_gateway import PaymentGateway, PaymentSession

logger = logging.getLogger(__name__)


class LocalPaymentGateway(PaymentGateway):

    def __init__(self, checkout_url: str = "http://localhost/checkout") -> None:
        self._checkout_url = checkout_url.rstrip("/")

    def open_session(self, amount: Money, customer_email: str) -> PaymentSession:
        if amount.minor_units <= 0:
            raise UpstreamPaymentError("Payment provider rejected a zero amount")
        reference = uuid.uuid4().hex[:12]
        logger.info(
            "Payment session %s opened for %s (%d minor units)",
            reference, customer_email, amount.minor_units,
        )
        return PaymentSession(
            reference=reference, payment_url=f"{self._checkout_url}/{reference}"
        )
