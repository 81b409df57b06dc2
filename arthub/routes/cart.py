from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from arthub.database import get_session
from arthub.models.user import User
from arthub.schemas.cart_schemas import CartAddRequest, CartResponse, CartUpdateRequest
from arthub.services import cart_service
from arthub.utils.token import get_current_user

router = APIRouter()


# View Cart

@router.get("/", response_model=CartResponse)
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_service.get_or_create_cart(session, current_user.id)
    return cart_service.cart_summary(session, current_user.id)


# Add to Cart

@router.post("/add", response_model=CartResponse)
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.add_item(session, current_user, data.artwork_id, data.quantity)


# Update Cart

@router.put("/item/{artwork_id}", response_model=CartResponse)
def update_cart_item(
    artwork_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.update_item(session, current_user, artwork_id, data.quantity)


# Remove Cart

@router.delete("/item/{artwork_id}", response_model=CartResponse)
def remove_cart_item(
    artwork_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.remove_item(session, current_user, artwork_id)


# Clear Cart

@router.delete("/", response_model=CartResponse)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not cart_service.clear_cart(session, current_user.id):
        raise HTTPException(404, "Cart not found")
    return cart_service.cart_summary(session, current_user.id)
