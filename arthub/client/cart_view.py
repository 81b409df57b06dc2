import logging
from typing import Callable, Optional

from arthub.client.api import ApiError
from arthub.client.cart import CartClient
from arthub.client.orders import CheckoutValidationError, OrderClient

logger = logging.getLogger(__name__)

CLOSED = "closed"
OPEN = "open"          # first fetch in flight
EMPTY = "empty"
POPULATED = "populated"
MUTATING = "mutating"  # a change is in flight, controls disabled

EMPTY_CART = {"items": [], "item_count": 0, "total_amount": 0.0}


def _silent(level: str, message: str):
    pass


class CartView:
    """
    State behind the cart modal and the checkout page.

    No optimistic updates: every mutation is followed by a full refetch
    and the view only ever shows what the server returned. One call is in
    flight at a time; while one is, controls report disabled and further
    actions are ignored.

    ``notify(level, message)`` receives ``"success"`` or ``"error"``
    notifications.
    """

    def __init__(
        self,
        cart_client: CartClient,
        order_client: Optional[OrderClient] = None,
        notify: Callable[[str, str], None] = _silent,
    ):
        self.cart_client = cart_client
        self.order_client = order_client
        self.notify = notify
        self.state = CLOSED
        self.cart = dict(EMPTY_CART)

    # -------- derived --------

    @property
    def items(self) -> list:
        return self.cart.get("items") or []

    @property
    def item_count(self) -> int:
        return self.cart.get("item_count", len(self.items))

    @property
    def total_amount(self) -> float:
        return self.cart.get("total_amount", 0.0)

    @property
    def controls_enabled(self) -> bool:
        return self.state in (EMPTY, POPULATED)

    def quantity_of(self, artwork_id: int) -> int:
        for item in self.items:
            if item["artwork_id"] == artwork_id:
                return item["quantity"]
        return 0

    # -------- open / close --------

    def open(self):
        if self.state != CLOSED:
            return
        self.state = OPEN
        self._refresh()

    def close(self):
        self.state = CLOSED

    def _settle(self):
        self.state = POPULATED if self.items else EMPTY

    def _refresh(self):
        try:
            self.cart = self.cart_client.get_cart() or dict(EMPTY_CART)
        except ApiError as e:
            # keep showing the last cart we had
            logger.warning(f"Cart refresh failed: {e.message}")
            self.notify("error", e.message)
        self._settle()

    # -------- mutations --------

    def _mutate(self, call: Callable[[], object], success_message: str) -> bool:
        if not self.controls_enabled:
            return False

        self.state = MUTATING
        ok = True
        try:
            call()
        except ApiError as e:
            ok = False
            self.notify("error", e.message)
        else:
            self.notify("success", success_message)

        self._refresh()
        return ok

    def add(self, artwork_id: int, quantity: int = 1) -> bool:
        """Add to cart from an artwork page; the modal does not need to be open."""
        if self.state == CLOSED:
            try:
                self.cart = self.cart_client.add_to_cart(artwork_id, quantity)
            except ApiError as e:
                self.notify("error", e.message)
                return False
            self.notify("success", "Added to cart")
            return True

        return self._mutate(
            lambda: self.cart_client.add_to_cart(artwork_id, quantity),
            "Added to cart",
        )

    def increment(self, artwork_id: int) -> bool:
        quantity = self.quantity_of(artwork_id)
        if not quantity:
            return False
        return self._mutate(
            lambda: self.cart_client.update_item(artwork_id, quantity + 1),
            "Cart updated",
        )

    def decrement(self, artwork_id: int) -> bool:
        quantity = self.quantity_of(artwork_id)
        # the minus button is disabled at 1
        if quantity <= 1:
            return False
        return self._mutate(
            lambda: self.cart_client.update_item(artwork_id, quantity - 1),
            "Cart updated",
        )

    def remove(self, artwork_id: int) -> bool:
        return self._mutate(
            lambda: self.cart_client.remove_item(artwork_id),
            "Item removed from cart",
        )

    def clear(self) -> bool:
        return self._mutate(self.cart_client.clear_cart, "Cart cleared")

    # -------- checkout --------

    def checkout(self, address) -> Optional[str]:
        """Return the payment page URL, or None when checkout did not start."""
        if self.order_client is None or not self.controls_enabled:
            return None

        self.state = MUTATING
        try:
            url = self.order_client.create_checkout_session(address, self.cart)
        except CheckoutValidationError as e:
            self.notify("error", str(e))
            return None
        except ApiError as e:
            self.notify("error", e.message)
            return None
        finally:
            self._settle()

        self.notify("success", "Redirecting to payment")
        return url
