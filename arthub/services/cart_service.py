import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from arthub.models.artwork import Artwork
from arthub.models.cart import Cart, CartItem
from arthub.models.user import User

logger = logging.getLogger(__name__)


def find_cart(session: Session, user_id: int) -> Optional[Cart]:
    return session.exec(select(Cart).where(Cart.user_id == user_id)).first()


def get_or_create_cart(session: Session, user_id: int) -> Cart:
    cart = find_cart(session, user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id)
    session.add(cart)
    try:
        session.commit()
    except IntegrityError:
        # another request created it first
        session.rollback()
        return find_cart(session, user_id)

    session.refresh(cart)
    return cart


def _find_item(session: Session, cart_id: int, artwork_id: int) -> Optional[CartItem]:
    return session.exec(
        select(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.artwork_id == artwork_id
        )
    ).first()


def _check_quantity(quantity: int):
    if quantity < 1:
        raise HTTPException(400, "Quantity must be at least 1")


def cart_summary(session: Session, user_id: int) -> dict:
    """
    Cart contents joined with live artwork data.

    Artworks that are no longer available are left out of both the item
    list and the totals.
    """
    cart = find_cart(session, user_id)
    if not cart:
        return {"items": [], "item_count": 0, "total_amount": 0.0}

    rows = session.exec(
        select(CartItem, Artwork, User)
        .join(Artwork, CartItem.artwork_id == Artwork.id)
        .join(User, Artwork.artist_id == User.id)
        .where(CartItem.cart_id == cart.id)
        .order_by(CartItem.added_at, CartItem.id)
    ).all()

    items = []
    total_amount = 0.0

    for item, artwork, artist in rows:
        if artwork.status != "available":
            continue

        line_total = artwork.price * item.quantity
        total_amount += line_total

        items.append({
            "artwork_id": artwork.id,
            "quantity": item.quantity,
            "added_at": item.added_at,
            "line_total": round(line_total, 2),
            "artwork": {
                "title": artwork.title,
                "price": artwork.price,
                "images": artwork.images or [],
                "status": artwork.status,
                "artist_id": artist.id,
                "artist_name": artist.name,
            },
        })

    return {
        "items": items,
        "item_count": len(items),
        "total_amount": round(total_amount, 2),
    }


# Add to Cart

def add_item(session: Session, user: User, artwork_id: int, quantity: int = 1) -> dict:
    _check_quantity(quantity)

    artwork = session.get(Artwork, artwork_id)
    if not artwork:
        raise HTTPException(404, "Artwork not found")

    if artwork.status != "available":
        raise HTTPException(400, "Artwork is not available for purchase")

    if artwork.artist_id == user.id:
        raise HTTPException(400, "Cannot add your own artwork to cart")

    cart = get_or_create_cart(session, user.id)

    existing_item = _find_item(session, cart.id, artwork_id)
    if existing_item:
        existing_item.quantity += quantity
        session.add(existing_item)
    else:
        session.add(CartItem(cart_id=cart.id, artwork_id=artwork_id, quantity=quantity))

    cart.updated_at = datetime.utcnow()
    session.add(cart)

    try:
        session.commit()
    except IntegrityError:
        # a concurrent add inserted the same line; fold into it
        session.rollback()
        existing_item = _find_item(session, cart.id, artwork_id)
        if existing_item is None:
            logger.exception(f"Cart {cart.id} rejected artwork {artwork_id}")
            raise HTTPException(400, "Could not add artwork to cart")
        existing_item.quantity += quantity
        session.add(existing_item)
        session.commit()

    logger.info(f"User {user.id} added artwork {artwork_id} x{quantity} to cart")
    return cart_summary(session, user.id)


# Update Cart

def update_item(session: Session, user: User, artwork_id: int, quantity: int) -> dict:
    _check_quantity(quantity)

    cart = find_cart(session, user.id)
    if not cart:
        raise HTTPException(404, "Cart not found")

    item = _find_item(session, cart.id, artwork_id)
    if not item:
        raise HTTPException(404, "Item not found in cart")

    item.quantity = quantity
    cart.updated_at = datetime.utcnow()
    session.add(item)
    session.add(cart)
    session.commit()

    return cart_summary(session, user.id)


# Remove Cart

def remove_item(session: Session, user: User, artwork_id: int) -> dict:
    cart = find_cart(session, user.id)
    if not cart:
        raise HTTPException(404, "Cart not found")

    item = _find_item(session, cart.id, artwork_id)
    if item:
        session.delete(item)
        cart.updated_at = datetime.utcnow()
        session.add(cart)
        session.commit()

    return cart_summary(session, user.id)


# Clear Cart

def clear_cart(session: Session, user_id: int, commit: bool = True) -> bool:
    """Empty the user's cart. Returns False when the user has no cart yet."""
    cart = find_cart(session, user_id)
    if not cart:
        return False

    items = session.exec(
        select(CartItem).where(CartItem.cart_id == cart.id)
    ).all()

    for item in items:
        session.delete(item)

    cart.updated_at = datetime.utcnow()
    session.add(cart)

    if commit:
        session.commit()
    return True
