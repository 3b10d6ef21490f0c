"""Port to the external payment provider.

Only the shape of the conversation is defined here; concrete providers are
plugged in by the composition root.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from bazaar.domain.model.value_objects import Money


@dataclass(frozen=True)
class PaymentSession:
    reference: str  # the provider's order id, echoed back by its webhook
    payment_url: str


class PaymentGateway(ABC):

    @abstractmethod
    def open_session(self, amount: Money, customer_email: str) -> PaymentSession:
        """Register a payable order with the provider.

        Implementations raise UpstreamPaymentError when the provider
        cannot be reached or rejects the request.
        """
