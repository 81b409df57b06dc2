from typing import Optional, Union

from pydantic import ValidationError

from arthub.client.api import ApiClient
from arthub.schemas.checkout_schemas import ShippingAddress

ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")


class CheckoutValidationError(ValueError):
    """Checkout was refused locally; nothing was sent to the server."""


def validate_checkout(address: Union[ShippingAddress, dict, None], cart: Optional[dict]) -> ShippingAddress:
    if not cart or not cart.get("items"):
        raise CheckoutValidationError("Your cart is empty")

    if isinstance(address, ShippingAddress):
        data = address.model_dump()
    else:
        data = dict(address or {})

    missing = [f for f in ADDRESS_FIELDS if not str(data.get(f) or "").strip()]
    if missing:
        raise CheckoutValidationError(
            "Please fill in all address fields: " + ", ".join(missing)
        )

    try:
        return ShippingAddress(**{f: str(data[f]).strip() for f in ADDRESS_FIELDS})
    except ValidationError as e:
        raise CheckoutValidationError("Invalid shipping address") from e


class OrderClient:
    def __init__(self, api: ApiClient):
        self.api = api

    def create_checkout_session(self, address, cart: Optional[dict]) -> str:
        """Start checkout and return the payment page URL to redirect to."""
        shipping = validate_checkout(address, cart)

        data = self.api.post(
            "/orders/checkout",
            json={"shipping_address": shipping.model_dump()},
        )
        return data["url"]

    def list_orders(self, page: int = 1, limit: int = 10, status: Optional[str] = None) -> dict:
        params = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        return self.api.get("/orders/", params=params)

    def get_order(self, order_id: int) -> dict:
        return self.api.get(f"/orders/{order_id}")

    def cancel_order(self, order_id: int) -> dict:
        return self.api.patch(f"/orders/{order_id}/cancel")
