import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.dependencies.roles import is_owner_or_admin
from arthub.models.order import Order
from arthub.models.user import User
from arthub.schemas.checkout_schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderCancelResponse,
    OrderListResponse,
    OrderRead,
)
from arthub.services import order_service
from arthub.services.order_event_service import order_timeline
from arthub.services.payment_service import PaymentGateway, get_payment_gateway
from arthub.utils.pagination import paginate
from arthub.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_owned_order(session: Session, order_id: int, user: User) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    if not is_owner_or_admin(user, order.user_id):
        raise HTTPException(403, "Not authorized to view this order")

    return order


# Checkout

@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    data: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    return order_service.create_checkout(session, current_user, data.shipping_address, gateway)


# Payment provider callback (no auth, signed body)

@router.post("/webhook")
async def payment_webhook(
    request: Request,
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    body = (await request.body()).decode("utf-8")
    signature = request.headers.get("X-Razorpay-Signature")

    if not gateway.verify_webhook(body, signature):
        logger.warning("Webhook signature verification failed")
        raise HTTPException(400, "Invalid webhook signature")

    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(400, "Invalid webhook payload")

    # database work stays off the event loop
    await run_in_threadpool(order_service.handle_webhook_event, session, event)
    return {"received": True}


# My Orders

@router.get("/", response_model=OrderListResponse)
def list_orders(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    query = select(Order).where(Order.user_id == current_user.id)

    if status:
        query = query.where(Order.status == status)

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)

    return {
        "orders": [order_service.order_to_dict(o) for o in data["results"]],
        "pagination": data["pagination"],
    }


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_owned_order(session, order_id, current_user)
    return order_service.order_to_dict(order)


@router.get("/{order_id}/timeline")
def get_order_timeline(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_owned_order(session, order_id, current_user)

    return {
        "order_id": order.id,
        "events": [
            {
                "event_type": e.event_type,
                "from_status": e.from_status,
                "to_status": e.to_status,
                "meta": e.meta,
                "created_by": e.created_by,
                "created_at": e.created_at,
            }
            for e in order_timeline(session, order.id)
        ],
    }


# Cancel Order

@router.patch("/{order_id}/cancel", response_model=OrderCancelResponse)
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_owned_order(session, order_id, current_user)

    if order.status == "paid":
        raise HTTPException(400, "Paid orders cannot be cancelled")

    order_service.transition_order(
        session,
        order,
        "cancelled",
        created_by=f"user:{current_user.id}",
        meta={"reason": "cancelled_by_user"},
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} cancelled by user {current_user.id}")
    return {"message": "Order cancelled", "order": order_service.order_to_dict(order)}
