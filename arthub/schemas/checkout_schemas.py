# arthub/schemas/checkout_schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class ShippingAddress(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)

    @field_validator("street", "city", "state", "zip_code", "country")
    @classmethod
    def strip_field(cls, v: str, info):
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddress


class CheckoutResponse(BaseModel):
    session_id: str
    url: str
    order_id: int


class OrderLine(BaseModel):
    artwork_id: int
    title: str
    price: float     # unit price captured at checkout
    quantity: int
    line_total: float


class OrderRead(BaseModel):
    id: int
    user_id: int
    status: str
    total_amount: float
    payment_method: str
    payment_session_id: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    exhibition_id: Optional[int] = None
    items: List[OrderLine]
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class OrderListResponse(BaseModel):
    orders: List[OrderRead]
    pagination: Pagination


class OrderCancelResponse(BaseModel):
    message: str
    order: OrderRead
