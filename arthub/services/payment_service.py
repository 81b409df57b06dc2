import logging
from typing import Dict, Any, List, Optional

import razorpay
import requests

from arthub.config import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """The payment provider refused or failed to create a session."""


class PaymentGateway:
    """
    Thin wrapper over Razorpay hosted payment links.

    A payment link is the provider-hosted checkout page: we create one per
    order and redirect the buyer to its ``short_url``. The provider reports
    the outcome through the webhook.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str,
        currency: str = "USD",
        frontend_url: str = "",
    ):
        self.client = razorpay.Client(auth=(key_id, key_secret))
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.frontend_url = frontend_url

    def create_checkout_session(
        self,
        *,
        order_id: int,
        amount: float,
        description: str,
        lines: List[Dict[str, Any]],
        customer_email: Optional[str] = None,
    ) -> Dict[str, str]:
        payload = {
            "amount": int(round(amount * 100)),  # smallest currency unit
            "currency": self.currency,
            "accept_partial": False,
            "description": description[:2048],
            "reference_id": f"order_{order_id}",
            "callback_url": f"{self.frontend_url}/checkout/success?order_id={order_id}",
            "callback_method": "get",
            "notes": {
                "order_id": str(order_id),
                "items": ", ".join(f"{line['title']} x{line['quantity']}" for line in lines)[:256],
            },
        }
        if customer_email:
            payload["customer"] = {"email": customer_email}

        try:
            link = self.client.payment_link.create(payload)
        except (
            razorpay.errors.BadRequestError,
            razorpay.errors.GatewayError,
            razorpay.errors.ServerError,
            requests.RequestException,
        ) as e:
            logger.exception(f"Payment link creation failed for order {order_id}")
            raise PaymentGatewayError(str(e)) from e

        return {"id": link["id"], "url": link["short_url"]}

    def verify_webhook(self, body: str, signature: Optional[str]) -> bool:
        if not signature:
            return False
        try:
            self.client.utility.verify_webhook_signature(body, signature, self.webhook_secret)
        except razorpay.errors.SignatureVerificationError:
            return False
        return True


_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    global _gateway
    if _gateway is None:
        _gateway = PaymentGateway(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            webhook_secret=settings.RAZORPAY_WEBHOOK_SECRET,
            currency=settings.payment_currency,
            frontend_url=settings.frontend_url,
        )
    return _gateway
