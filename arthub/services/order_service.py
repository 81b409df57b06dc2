import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from arthub.constants.order_status import ALLOWED_TRANSITIONS, STATUS_TIMESTAMPS
from arthub.models.artwork import Artwork
from arthub.models.cart import CartItem
from arthub.models.exhibition import Exhibition
from arthub.models.order import Order
from arthub.models.order_item import OrderItem
from arthub.models.user import User
from arthub.schemas.checkout_schemas import ShippingAddress
from arthub.services.cart_service import clear_cart, find_cart
from arthub.services.exhibition_access_service import build_access, find_access
from arthub.services.order_event_service import log_order_event
from arthub.services.payment_service import PaymentGateway, PaymentGatewayError

logger = logging.getLogger(__name__)

PAID_EVENTS = {"payment_link.paid"}
FAILED_EVENTS = {"payment_link.cancelled", "payment_link.expired", "payment.failed"}


def transition_order(
    session: Session,
    order: Order,
    new_status: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """Move an order to ``new_status``; the caller commits."""
    old_status = order.status

    if new_status not in ALLOWED_TRANSITIONS.get(old_status, []):
        raise HTTPException(400, f"Cannot change order from {old_status} to {new_status}")

    now = datetime.utcnow()
    order.status = new_status
    order.updated_at = now

    stamp = STATUS_TIMESTAMPS.get(new_status)
    if stamp and getattr(order, stamp) is None:
        setattr(order, stamp, now)

    session.add(order)
    log_order_event(
        session,
        order_id=order.id,
        event_type=f"order_{new_status}",
        from_status=old_status,
        to_status=new_status,
        created_by=created_by,
        meta=meta,
    )


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total_amount": order.total_amount,
        "payment_method": order.payment_method,
        "payment_session_id": order.payment_session_id,
        "shipping_address": order.shipping_address,
        "exhibition_id": order.exhibition_id,
        "items": [
            {
                "artwork_id": i.artwork_id,
                "title": i.title,
                "price": i.price,
                "quantity": i.quantity,
                "line_total": round(i.price * i.quantity, 2),
            }
            for i in order.items
        ],
        "paid_at": order.paid_at,
        "cancelled_at": order.cancelled_at,
        "refunded_at": order.refunded_at,
        "created_at": order.created_at,
    }


def _start_payment_session(
    session: Session,
    order: Order,
    user: User,
    lines: list,
    description: str,
    gateway: PaymentGateway,
) -> dict:
    try:
        payment_session = gateway.create_checkout_session(
            order_id=order.id,
            amount=order.total_amount,
            description=description,
            lines=lines,
            customer_email=user.email,
        )
    except PaymentGatewayError:
        transition_order(session, order, "cancelled", meta={"reason": "payment_session_failed"})
        session.commit()
        raise HTTPException(502, "Failed to create checkout session")

    order.payment_session_id = payment_session["id"]
    session.add(order)
    session.commit()

    logger.info(f"Checkout session {payment_session['id']} created for order {order.id}")

    return {
        "session_id": payment_session["id"],
        "url": payment_session["url"],
        "order_id": order.id,
    }


# Checkout button in Cart page - snapshot cart into a pending order

def create_checkout(
    session: Session,
    user: User,
    address: ShippingAddress,
    gateway: PaymentGateway,
) -> dict:
    cart = find_cart(session, user.id)

    cart_items = []
    if cart:
        cart_items = session.exec(
            select(CartItem)
            .where(CartItem.cart_id == cart.id)
            .order_by(CartItem.added_at, CartItem.id)
        ).all()

    if not cart_items:
        raise HTTPException(400, "Cart is empty")

    # Prices are re-read from the artworks, never trusted from the client
    lines = []
    total_amount = 0.0

    for item in cart_items:
        artwork = session.get(Artwork, item.artwork_id)
        if not artwork or artwork.status != "available":
            title = artwork.title if artwork else "Unknown"
            raise HTTPException(400, f'Artwork "{title}" is not available')

        lines.append({
            "artwork_id": artwork.id,
            "title": artwork.title,
            "price": artwork.price,
            "quantity": item.quantity,
        })
        total_amount += artwork.price * item.quantity

    order = Order(
        user_id=user.id,
        total_amount=round(total_amount, 2),
        status="pending",
        shipping_street=address.street,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_zip_code=address.zip_code,
        shipping_country=address.country,
    )
    session.add(order)
    session.commit()
    session.refresh(order)

    for line in lines:
        session.add(OrderItem(order_id=order.id, **line))

    log_order_event(
        session,
        order_id=order.id,
        event_type="order_created",
        to_status="pending",
        created_by=f"user:{user.id}",
        meta={"item_count": len(lines)},
    )
    session.commit()

    # cart stays untouched until the provider confirms payment
    description = f"Art Hub order #{order.id}"
    return _start_payment_session(session, order, user, lines, description, gateway)


def create_exhibition_checkout(
    session: Session,
    user: User,
    exhibition: Exhibition,
    gateway: PaymentGateway,
) -> dict:
    order = Order(
        user_id=user.id,
        total_amount=exhibition.price,
        status="pending",
        exhibition_id=exhibition.id,
    )
    session.add(order)
    session.commit()
    session.refresh(order)

    log_order_event(
        session,
        order_id=order.id,
        event_type="order_created",
        to_status="pending",
        created_by=f"user:{user.id}",
        meta={"exhibition_id": exhibition.id},
    )
    session.commit()

    lines = [{"title": exhibition.title, "quantity": 1}]
    description = f"Exhibition access: {exhibition.title}"
    return _start_payment_session(session, order, user, lines, description, gateway)


def finalize_payment(session: Session, order: Order, payment_intent_id: Optional[str] = None) -> Order:
    """
    Single source of truth for completing payments.

    Safe to call more than once for the same order.
    """
    if order.status == "paid":
        return order

    transition_order(session, order, "paid", meta={"payment_intent_id": payment_intent_id})
    order.payment_intent_id = payment_intent_id

    for item in order.items:
        artwork = session.get(Artwork, item.artwork_id)
        if not artwork:
            continue

        artwork.status = "sold"
        artwork.updated_at = datetime.utcnow()
        session.add(artwork)

        artist = session.get(User, artwork.artist_id)
        if artist:
            artist.total_sales += item.price * item.quantity
            session.add(artist)

    if order.items:
        clear_cart(session, order.user_id, commit=False)

    if order.exhibition_id and not find_access(session, order.user_id, order.exhibition_id):
        session.add(build_access(
            user_id=order.user_id,
            exhibition_id=order.exhibition_id,
            access_type="paid",
            payment_method=order.payment_method,
            payment_session_id=order.payment_session_id,
            order_id=order.id,
        ))

    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} marked paid")
    return order


def _order_from_event(session: Session, entity: dict) -> Optional[Order]:
    session_id = entity.get("id")
    if session_id:
        order = session.exec(
            select(Order).where(Order.payment_session_id == session_id)
        ).first()
        if order:
            return order

    order_id = (entity.get("notes") or {}).get("order_id")
    if order_id:
        return session.get(Order, int(order_id))
    return None


def handle_webhook_event(session: Session, event: dict) -> Optional[Order]:
    """Apply a verified provider event. Unknown events are ignored."""
    event_type = event.get("event")
    payload = event.get("payload") or {}

    link_entity = (payload.get("payment_link") or {}).get("entity") or {}
    payment_entity = (payload.get("payment") or {}).get("entity") or {}

    if event_type not in PAID_EVENTS | FAILED_EVENTS:
        logger.warning(f"Unhandled event type: {event_type}")
        return None

    order = _order_from_event(session, link_entity or payment_entity)
    if not order:
        logger.warning(f"No order found for {event_type} event")
        return None

    if event_type in PAID_EVENTS:
        if order.status not in ("pending", "paid"):
            # paid after the order was cancelled; needs a manual refund
            logger.warning(f"Payment received for {order.status} order {order.id}")
            log_order_event(
                session,
                order_id=order.id,
                event_type="payment_after_close",
                from_status=order.status,
                to_status=order.status,
                meta={"payment_intent_id": payment_entity.get("id")},
            )
            session.commit()
            return order
        return finalize_payment(session, order, payment_entity.get("id"))

    if order.status == "pending":
        transition_order(session, order, "cancelled", meta={"event": event_type})
        session.commit()
        session.refresh(order)
        logger.info(f"Order {order.id} cancelled by {event_type}")

    return order
